"""
Serialization of the court state to and from its persisted JSON document.

Layout (one namespace key, camelCase fields, ISO-8601 timestamps):

    {"badminton-store": {"state": {"players": [...], "courts": [...],
                                   "activeSessions": [...], "sessionHistory": [...]},
                         "version": 0}}
"""

import json

from pydantic import ValidationError

from courts.logic.state import CourtState

STORE_NAMESPACE = "badminton-store"
STORE_VERSION = 0


class StateFormatError(ValueError):
    """Persisted document does not describe a valid court state."""


def dump_state(state: CourtState) -> dict:
    """Build the persisted document for a state."""
    return {
        STORE_NAMESPACE: {
            "state": state.model_dump(mode="json", by_alias=True),
            "version": STORE_VERSION,
        },
    }


def serialize_state(state: CourtState) -> str:
    return json.dumps(dump_state(state), indent=2)


def load_state(document: object) -> CourtState:
    """
    Rehydrate a state from a persisted document.

    Raises:
        StateFormatError: If the namespace, version or state payload is invalid

    """
    if not isinstance(document, dict) or STORE_NAMESPACE not in document:
        raise StateFormatError(f"Expected a JSON object with a '{STORE_NAMESPACE}' key")
    entry = document[STORE_NAMESPACE]
    if not isinstance(entry, dict) or "state" not in entry:
        raise StateFormatError("Persisted entry has no 'state' payload")
    version = entry.get("version", STORE_VERSION)
    if version != STORE_VERSION:
        raise StateFormatError(f"Unsupported state version {version!r}, expected {STORE_VERSION}")
    try:
        return CourtState.model_validate(entry["state"])
    except ValidationError as exc:
        raise StateFormatError(f"Invalid court state: {exc.error_count()} validation error(s)") from exc


def parse_state(content: str) -> CourtState:
    """Parse a serialized document; see load_state."""
    try:
        document = json.loads(content)
    except json.JSONDecodeError as exc:
        raise StateFormatError(f"State document is not valid JSON: {exc}") from exc
    return load_state(document)
