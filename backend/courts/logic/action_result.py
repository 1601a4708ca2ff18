"""Result type returned by every court service command."""

from typing import NamedTuple

from courts.logic.enums import CourtErrorCode
from courts.logic.state import CourtState


class ActionResult(NamedTuple):
    """
    Outcome of a command.

    On success `state` is the new state; on rejection it is the unchanged
    previous state and `message` holds the user-facing reason. `entity_id`
    carries the id of a newly created player or court.
    """

    success: bool
    state: CourtState
    message: str | None = None
    error_code: CourtErrorCode | None = None
    entity_id: str | None = None
