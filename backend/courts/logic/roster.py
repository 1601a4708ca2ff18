"""
Player and court registry.

Pure transition functions over CourtState. Each either returns the new
state or raises a CourtRuleError, leaving the input untouched.
"""

import uuid

from courts.logic.enums import PlayerRank
from courts.logic.exceptions import GuardViolation, InvalidInputError
from courts.logic.state import Court, CourtState, Player
from courts.logic.state_utils import remove_session


def generate_id() -> str:
    """Fresh unique identifier for players, courts, sessions and history records."""
    return str(uuid.uuid4())


def _clean_name(name: str, kind: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidInputError(f"{kind} name must not be blank")
    return cleaned


def add_player(state: CourtState, name: str, rank: PlayerRank) -> tuple[CourtState, Player]:
    """Register a new player with no games played."""
    player = Player(id=generate_id(), name=_clean_name(name, "Player"), rank=rank)
    return state.model_copy(update={"players": (*state.players, player)}), player


def update_player(state: CourtState, player: Player) -> CourtState:
    """
    Replace the player with the same id.

    No-op when the id is not registered.
    """
    if state.find_player(player.id) is None:
        return state
    cleaned = player.model_copy(update={"name": _clean_name(player.name, "Player")})
    players = tuple(cleaned if p.id == player.id else p for p in state.players)
    return state.model_copy(update={"players": players})


def delete_player(state: CourtState, player_id: str) -> CourtState:
    """
    Remove a player from the roster.

    Does not check court assignments; any slot still holding the id keeps it.
    """
    players = tuple(p for p in state.players if p.id != player_id)
    return state.model_copy(update={"players": players})


def add_court(state: CourtState, name: str) -> tuple[CourtState, Court]:
    """Register a new court."""
    court = Court(id=generate_id(), name=_clean_name(name, "Court"))
    return state.model_copy(update={"courts": (*state.courts, court)}), court


def delete_court(state: CourtState, court_id: str) -> CourtState:
    """
    Remove a court together with its session.

    Raises GuardViolation while a game is being played on the court.
    """
    session = state.find_session(court_id)
    if session is not None and session.is_locked:
        raise GuardViolation("Cannot delete court with active session")
    courts = tuple(c for c in state.courts if c.id != court_id)
    return remove_session(state.model_copy(update={"courts": courts}), court_id)
