"""
String enum definitions for court occupancy concepts.
"""

from enum import Enum


class PlayerRank(str, Enum):
    """Self-reported skill level of a player."""

    BEGINNER = "Beginner"
    MID = "Mid"
    PRO = "Pro"


class Team(str, Enum):
    """The two sides of a doubles court."""

    TEAM1 = "team1"
    TEAM2 = "team2"

    @property
    def other(self) -> "Team":
        return Team.TEAM2 if self is Team.TEAM1 else Team.TEAM1


class SessionPhase(str, Enum):
    """Lifecycle phase of the session on a single court."""

    EMPTY = "empty"  # no session exists for the court
    FILLING = "filling"  # session exists, at least one slot empty
    READY = "ready"  # all four slots filled, not started
    ACTIVE = "active"
    PAUSED = "paused"


class CourtAction(str, Enum):
    """Commands accepted by the court service."""

    ADD_PLAYER = "add_player"
    UPDATE_PLAYER = "update_player"
    DELETE_PLAYER = "delete_player"
    ADD_COURT = "add_court"
    DELETE_COURT = "delete_court"
    ASSIGN_PLAYER = "assign_player_to_court"
    REMOVE_PLAYER = "remove_player_from_court"
    CHANGE_PLAYER = "change_player_in_court"
    START_SESSION = "start_session"
    PAUSE_SESSION = "pause_session"
    RESUME_SESSION = "resume_session"
    END_SESSION = "end_session"
    INCREMENT_SHUTTLECOCK = "increment_shuttlecock"
    DECREMENT_SHUTTLECOCK = "decrement_shuttlecock"
    AUTO_ASSIGN = "auto_assign_players"
    AUTO_FILL = "auto_fill_players"
    HARD_RESET = "hard_reset"
    GAME_RESET = "game_reset"


class CourtErrorCode(str, Enum):
    """Error codes attached to rejected commands."""

    CONFLICT = "conflict"
    GUARD_VIOLATION = "guard_violation"
    INCOMPLETE_STATE = "incomplete_state"
    INSUFFICIENT_PLAYERS = "insufficient_players"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
