"""Bulk resets of the court state."""

from courts.logic.state import CourtState
from courts.logic.state_utils import map_players


def hard_reset(state: CourtState) -> CourtState:  # noqa: ARG001
    """Drop everything: players, courts, sessions and history."""
    return CourtState()


def game_reset(state: CourtState) -> CourtState:
    """
    Start a fresh club night with the same roster and courts.

    Player and court identities survive; game counters, live sessions and
    history are cleared.
    """
    state = map_players(state, lambda p: p.model_copy(update={"game_count": 0, "last_game_time": None}))
    return state.model_copy(update={"active_sessions": (), "session_history": ()})
