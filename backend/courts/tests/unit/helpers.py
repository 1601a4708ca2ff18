from datetime import UTC, datetime, timedelta

from courts.logic.enums import PlayerRank
from courts.logic.state import (
    EMPTY_SLOT,
    Court,
    CourtSession,
    CourtState,
    HistoryRecord,
    Player,
    SessionSlots,
)

T0 = datetime(2026, 10, 19, 18, 0, 0, tzinfo=UTC)

B = PlayerRank.BEGINNER
M = PlayerRank.MID
P = PlayerRank.PRO


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


def make_player(
    player_id: str,
    rank: PlayerRank = M,
    *,
    game_count: int = 0,
    last_game_time: datetime | None = None,
    name: str | None = None,
) -> Player:
    return Player(
        id=player_id,
        name=name or player_id.capitalize(),
        rank=rank,
        game_count=game_count,
        last_game_time=last_game_time,
    )


def make_players(ranks: list[PlayerRank], prefix: str = "p") -> tuple[Player, ...]:
    return tuple(make_player(f"{prefix}{i}", rank) for i, rank in enumerate(ranks))


def make_courts(count: int) -> tuple[Court, ...]:
    return tuple(Court(id=f"c{i + 1}", name=f"Court {i + 1}") for i in range(count))


def make_session(
    court_id: str,
    team1: tuple[str, str] = (EMPTY_SLOT, EMPTY_SLOT),
    team2: tuple[str, str] = (EMPTY_SLOT, EMPTY_SLOT),
    *,
    is_active: bool = False,
    is_paused: bool = False,
    start_time: datetime | None = None,
    pause_time: datetime | None = None,
    shuttlecock_count: int = 0,
) -> CourtSession:
    if is_active and start_time is None:
        start_time = T0
    return CourtSession(
        id=f"s-{court_id}",
        court_id=court_id,
        players=SessionSlots(team1=team1, team2=team2),
        is_active=is_active,
        is_paused=is_paused,
        start_time=start_time,
        pause_time=pause_time,
        shuttlecock_count=shuttlecock_count,
    )


def make_state(
    players: tuple[Player, ...] = (),
    courts: tuple[Court, ...] = (),
    sessions: tuple[CourtSession, ...] = (),
    history: tuple[HistoryRecord, ...] = (),
) -> CourtState:
    return CourtState(players=players, courts=courts, active_sessions=sessions, session_history=history)


def full_session_state(
    ranks: tuple[PlayerRank, PlayerRank, PlayerRank, PlayerRank] = (M, M, M, M),
    *,
    is_active: bool = False,
    is_paused: bool = False,
    extra_players: tuple[Player, ...] = (),
    courts: int = 1,
) -> CourtState:
    """State with court c1 holding p0,p1 (team1) vs p2,p3 (team2)."""
    players = make_players(list(ranks))
    session = make_session(
        "c1",
        ("p0", "p1"),
        ("p2", "p3"),
        is_active=is_active,
        is_paused=is_paused,
        pause_time=T0 + timedelta(minutes=5) if is_paused else None,
    )
    return make_state(players + extra_players, make_courts(courts), (session,))


def balance_of(state: CourtState, court_id: str) -> int:
    values = {B: 1, M: 2, P: 3}
    session = state.find_session(court_id)
    assert session is not None
    team1 = sum(values[state.find_player(pid).rank] for pid in session.players.team1)
    team2 = sum(values[state.find_player(pid).rank] for pid in session.players.team2)
    return abs(team1 - team2)
