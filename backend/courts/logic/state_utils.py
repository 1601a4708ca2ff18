"""
Immutable state update utilities using Pydantic model_copy.

Provides helper functions for common immutable updates on the frozen
court models. These functions never mutate the input state - they
always return new state objects with the requested changes applied.
"""

from collections.abc import Callable

from courts.logic.enums import Team
from courts.logic.state import CourtSession, CourtState, Player


def replace_session(state: CourtState, session: CourtSession) -> CourtState:
    """
    Return new state with the court's session replaced, or appended if absent.

    Args:
        state: Current court state
        session: Session to store, matched by court_id

    Returns:
        New CourtState containing the session

    """
    sessions = list(state.active_sessions)
    for i, existing in enumerate(sessions):
        if existing.court_id == session.court_id:
            sessions[i] = session
            break
    else:
        sessions.append(session)
    return state.model_copy(update={"active_sessions": tuple(sessions)})


def remove_session(state: CourtState, court_id: str) -> CourtState:
    """Return new state without the session for court_id."""
    sessions = tuple(s for s in state.active_sessions if s.court_id != court_id)
    return state.model_copy(update={"active_sessions": sessions})


def update_session(state: CourtState, court_id: str, **updates: object) -> CourtState:
    """
    Return new state with fields of an existing session updated.

    Raises:
        ValueError: If no session exists for the court

    """
    session = state.find_session(court_id)
    if session is None:
        raise ValueError(f"No session for court {court_id}")
    return replace_session(state, session.model_copy(update=updates))


def set_slot(session: CourtSession, team: Team, slot: int, player_id: str) -> CourtSession:
    """Return new session with one slot set to player_id (or cleared with "")."""
    return session.model_copy(update={"players": session.players.with_slot(team, slot, player_id)})


def map_players(state: CourtState, fn: Callable[[Player], Player]) -> CourtState:
    """Return new state with fn applied to every player."""
    return state.model_copy(update={"players": tuple(fn(p) for p in state.players)})
