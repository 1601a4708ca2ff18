"""
Session lifecycle for a single court.

    EMPTY -> FILLING -> READY -> ACTIVE <-> PAUSED -> (ended, session removed)

Slots may change only while the session is not active or is paused. Ending a
session moves it into history and credits a game to each of its four players.
"""

from datetime import datetime

from courts.logic.enums import Team
from courts.logic.exceptions import (
    ConflictError,
    GuardViolation,
    IncompleteStateError,
    InvalidInputError,
    NotFoundError,
)
from courts.logic.roster import generate_id
from courts.logic.state import (
    EMPTY_SLOT,
    SLOT_INDICES,
    CourtSession,
    CourtState,
    HistoryRecord,
    HistoryTeams,
    Player,
)
from courts.logic.state_utils import map_players, remove_session, replace_session, set_slot, update_session


def validate_slot(slot: int) -> None:
    if slot not in SLOT_INDICES:
        raise InvalidInputError(f"Slot must be one of {SLOT_INDICES}, got {slot}")


def require_court(state: CourtState, court_id: str) -> None:
    if state.find_court(court_id) is None:
        raise NotFoundError(f"Court {court_id} does not exist")


def require_session(state: CourtState, court_id: str) -> CourtSession:
    session = state.find_session(court_id)
    if session is None:
        raise NotFoundError("No players assigned to this court")
    return session


def require_unlocked(session: CourtSession | None) -> None:
    """Reject slot changes while a game is being played (it must be paused first)."""
    if session is not None and session.is_locked:
        raise GuardViolation("Cannot change players during an active session; pause it first")


def ensure_session(state: CourtState, court_id: str) -> tuple[CourtState, CourtSession]:
    """Return the court's session, creating an empty one if none exists."""
    session = state.find_session(court_id)
    if session is not None:
        return state, session
    session = CourtSession(id=generate_id(), court_id=court_id)
    return replace_session(state, session), session


def assign_player_to_court(
    state: CourtState,
    court_id: str,
    player_id: str,
    team: Team,
    slot: int,
) -> CourtState:
    """Place a player into one slot of the court's session."""
    validate_slot(slot)
    require_court(state, court_id)
    if state.find_player(player_id) is None:
        raise NotFoundError(f"Player {player_id} does not exist")
    if player_id in state.assigned_player_ids():
        raise ConflictError("Player is already assigned to a court")

    require_unlocked(state.find_session(court_id))
    state, session = ensure_session(state, court_id)

    occupant = session.players.get(team, slot)
    if occupant != EMPTY_SLOT:
        raise ConflictError("That position is already taken; remove the player first")

    return replace_session(state, set_slot(session, team, slot, player_id))


def remove_player_from_court(state: CourtState, court_id: str, team: Team, slot: int) -> CourtState:
    """Clear one slot of the court's session."""
    validate_slot(slot)
    session = require_session(state, court_id)
    require_unlocked(session)
    return replace_session(state, set_slot(session, team, slot, EMPTY_SLOT))


def start_session(state: CourtState, court_id: str, now: datetime) -> CourtState:
    """Start the game; all four slots must be filled."""
    session = require_session(state, court_id)
    if session.is_active:
        raise GuardViolation("Session has already started")
    if not session.players.is_full():
        raise IncompleteStateError("All player slots must be filled to start a session")
    return update_session(
        state,
        court_id,
        is_active=True,
        is_paused=False,
        start_time=now,
        pause_time=None,
        end_time=None,
    )


def pause_session(state: CourtState, court_id: str, now: datetime) -> CourtState:
    """Pause a running game, unlocking its slots."""
    session = require_session(state, court_id)
    if not session.is_active:
        raise IncompleteStateError("Session is not active")
    if session.is_paused:
        raise IncompleteStateError("Session is already paused")
    return update_session(state, court_id, is_paused=True, pause_time=now)


def resume_session(state: CourtState, court_id: str) -> CourtState:
    """Resume a paused game; slots vacated during the pause must be refilled first."""
    session = require_session(state, court_id)
    if not session.is_active:
        raise IncompleteStateError("Session is not active")
    if not session.is_paused:
        raise IncompleteStateError("Session is not paused")
    if not session.players.is_full():
        raise IncompleteStateError("All player slots must be filled to resume a session")
    return update_session(state, court_id, is_paused=False, pause_time=None)


def _snapshot(state: CourtState, player_id: str) -> Player:
    player = state.find_player(player_id)
    if player is None:
        raise NotFoundError(f"Player {player_id} no longer exists")
    return player


def end_session(
    state: CourtState,
    court_id: str,
    shuttlecock_count: int,
    now: datetime,
) -> tuple[CourtState, HistoryRecord]:
    """
    Finish the game on a court.

    The session leaves the active set, a history record is prepended, and
    each of the four players gets one more game with last_game_time = end
    time. Player snapshots in the record are taken before the increment.
    """
    if shuttlecock_count < 0:
        raise InvalidInputError("Shuttlecock count must not be negative")
    session = state.find_session(court_id)
    if session is None or not session.is_active or session.start_time is None:
        raise IncompleteStateError("Session is not active")
    court = state.find_court(court_id)
    if court is None:
        raise NotFoundError(f"Court {court_id} no longer exists")
    if not session.players.is_full():
        raise IncompleteStateError("All player slots must be filled to end a session")

    slots = session.players
    record = HistoryRecord(
        id=generate_id(),
        court_id=court_id,
        court_name=court.name,
        players=HistoryTeams(
            team1=(_snapshot(state, slots.team1[0]), _snapshot(state, slots.team1[1])),
            team2=(_snapshot(state, slots.team2[0]), _snapshot(state, slots.team2[1])),
        ),
        start_time=session.start_time,
        end_time=now,
        shuttlecock_count=shuttlecock_count,
    )

    played = set(slots.all_ids())
    state = remove_session(state, court_id)
    state = state.model_copy(update={"session_history": (record, *state.session_history)})
    state = map_players(
        state,
        lambda p: (
            p.model_copy(update={"game_count": p.game_count + 1, "last_game_time": now}) if p.id in played else p
        ),
    )
    return state, record


def increment_shuttlecock(state: CourtState, court_id: str) -> CourtState:
    """Count one more shuttlecock used; ignored unless the session is active."""
    session = state.find_session(court_id)
    if session is None or not session.is_active:
        return state
    return update_session(state, court_id, shuttlecock_count=session.shuttlecock_count + 1)


def decrement_shuttlecock(state: CourtState, court_id: str) -> CourtState:
    """Undo one shuttlecock; ignored unless active, and never below zero."""
    session = state.find_session(court_id)
    if session is None or not session.is_active or session.shuttlecock_count == 0:
        return state
    return update_session(state, court_id, shuttlecock_count=session.shuttlecock_count - 1)
