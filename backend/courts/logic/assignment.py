"""
Balanced team assignment and player rotation.

Three entry points share the same notion of availability (players not in any
slot of any session) and the same rotation priority (fewest games first, then
longest since last game, never-played first):

- auto_assign_players: exhaustive search over the top-priority pool for the
  best-balanced foursome, replacing the court's slots wholesale.
- auto_fill_players: greedy placement into only the empty slots of an
  existing session.
- change_player_in_court: single-slot replacement picking the player that
  best balances the two teams.

These functions only write session slots; roster fields are read, never set.
"""

import itertools
import random
from typing import NamedTuple

import structlog

from courts.logic.enums import Team
from courts.logic.exceptions import IncompleteStateError, InsufficientResourceError
from courts.logic.lifecycle import (
    ensure_session,
    require_court,
    require_session,
    require_unlocked,
    validate_slot,
)
from courts.logic.settings import PLAYERS_PER_COURT, EngineSettings, rank_value
from courts.logic.state import EMPTY_SLOT, SLOT_INDICES, CourtState, Player, SessionSlots
from courts.logic.state_utils import replace_session, set_slot

logger = structlog.get_logger()


class TeamSplit(NamedTuple):
    """One candidate arrangement of four players into two teams."""

    team1: tuple[Player, Player]
    team2: tuple[Player, Player]
    balance: int
    total_game_count: int


def rotation_key(player: Player) -> tuple[int, bool, float]:
    """Sort key: fewest games first, then oldest last game (never played sorts first)."""
    last = player.last_game_time
    return (player.game_count, last is not None, last.timestamp() if last is not None else 0.0)


def prioritized_available_players(state: CourtState) -> list[Player]:
    """Available players in rotation order; full ties keep roster order."""
    return sorted(state.available_players(), key=rotation_key)


def team_strength(players: list[Player] | tuple[Player, ...], settings: EngineSettings) -> int:
    return sum(rank_value(p.rank, settings) for p in players)


def enumerate_splits(pool: list[Player], settings: EngineSettings) -> list[TeamSplit]:
    """
    Every 4-subset of the pool, each in its 3 distinct two-versus-two splits.

    With a pool of 12 that is C(12,4) * 3 = 1485 candidates.
    """
    splits: list[TeamSplit] = []
    for a, b, c, d in itertools.combinations(pool, PLAYERS_PER_COURT):
        total = a.game_count + b.game_count + c.game_count + d.game_count
        for team1, team2 in (((a, b), (c, d)), ((a, c), (b, d)), ((a, d), (b, c))):
            balance = abs(team_strength(team1, settings) - team_strength(team2, settings))
            splits.append(TeamSplit(team1, team2, balance, total))
    return splits


def choose_best_split(splits: list[TeamSplit], rng: random.Random) -> TeamSplit:
    """Minimum balance, then minimum total game count, then a uniform random pick."""
    best_key = min((s.balance, s.total_game_count) for s in splits)
    tied = [s for s in splits if (s.balance, s.total_game_count) == best_key]
    return rng.choice(tied)


def auto_assign_players(
    state: CourtState,
    court_id: str,
    rng: random.Random,
    settings: EngineSettings,
) -> CourtState:
    """
    Fill a court with the best-balanced foursome from the available pool.

    Any players already sitting in the (unlocked) session are replaced.
    """
    require_court(state, court_id)
    require_unlocked(state.find_session(court_id))

    available = prioritized_available_players(state)
    if len(available) < PLAYERS_PER_COURT:
        raise InsufficientResourceError("Not enough available players for auto-assignment")

    pool = available[: settings.auto_assign_pool_size]
    best = choose_best_split(enumerate_splits(pool, settings), rng)
    logger.debug(
        "auto-assign selected split",
        court_id=court_id,
        pool_size=len(pool),
        balance=best.balance,
        total_game_count=best.total_game_count,
    )

    state, session = ensure_session(state, court_id)
    slots = SessionSlots(
        team1=(best.team1[0].id, best.team1[1].id),
        team2=(best.team2[0].id, best.team2[1].id),
    )
    return replace_session(state, session.model_copy(update={"players": slots}))


def auto_fill_players(
    state: CourtState,
    court_id: str,
    rng: random.Random,
    settings: EngineSettings,
) -> CourtState:
    """
    Fill only the empty slots of a court's session, balancing greedily.

    Delegates to auto_assign_players when the court has no session yet.
    """
    require_court(state, court_id)
    session = state.find_session(court_id)
    if session is None:
        return auto_assign_players(state, court_id, rng, settings)
    require_unlocked(session)

    empty_positions = session.players.empty_positions()
    if not empty_positions:
        raise IncompleteStateError("No empty slots to fill")

    strengths = {team: 0 for team in Team}
    for team in Team:
        for pid in session.players.team(team):
            occupant = state.find_player(pid) if pid != EMPTY_SLOT else None
            if occupant is not None:
                strengths[team] += rank_value(occupant.rank, settings)

    available = prioritized_available_players(state)
    needed = len(empty_positions)
    if len(available) < needed:
        raise InsufficientResourceError(
            f"Not enough available players. Need {needed} but only {len(available)} available.",
        )

    to_assign = sorted(available[:needed], key=lambda p: rank_value(p.rank, settings))
    slots = session.players
    for player in to_assign:
        value = rank_value(player.rank, settings)
        if_team1 = abs(strengths[Team.TEAM1] + value - strengths[Team.TEAM2])
        if_team2 = abs(strengths[Team.TEAM1] - (strengths[Team.TEAM2] + value))
        team = Team.TEAM1 if if_team1 <= if_team2 else Team.TEAM2
        open_slots = [i for i in SLOT_INDICES if slots.get(team, i) == EMPTY_SLOT]
        if not open_slots:
            team = team.other
            open_slots = [i for i in SLOT_INDICES if slots.get(team, i) == EMPTY_SLOT]
        slots = slots.with_slot(team, open_slots[0], player.id)
        strengths[team] += value

    return replace_session(state, session.model_copy(update={"players": slots}))


def change_player_in_court(
    state: CourtState,
    court_id: str,
    team: Team,
    slot: int,
    settings: EngineSettings,
) -> CourtState:
    """Swap the player in one slot for the available player that best balances the teams."""
    validate_slot(slot)
    session = require_session(state, court_id)
    require_unlocked(session)

    if session.players.get(team, slot) == EMPTY_SLOT:
        raise IncompleteStateError("No player in that position to change")

    available = state.available_players()
    if not available:
        raise InsufficientResourceError("No available players to swap with")

    strengths = {t: 0 for t in Team}
    for other_team in Team:
        for i in SLOT_INDICES:
            if (other_team, i) == (team, slot):
                continue
            pid = session.players.get(other_team, i)
            occupant = state.find_player(pid) if pid != EMPTY_SLOT else None
            if occupant is not None:
                strengths[other_team] += rank_value(occupant.rank, settings)

    best_player = available[0]
    best_balance: int | None = None
    for candidate in available:
        trial = dict(strengths)
        trial[team] += rank_value(candidate.rank, settings)
        balance = abs(trial[Team.TEAM1] - trial[Team.TEAM2])
        if best_balance is None or balance < best_balance:
            best_balance = balance
            best_player = candidate

    return replace_session(state, set_slot(session, team, slot, best_player.id))
