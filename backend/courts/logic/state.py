"""
Court occupancy state models.

All models are frozen; every engine operation returns a new CourtState.
Field aliases are camelCase so that model_dump(by_alias=True) produces the
persisted document layout directly.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from courts.logic.enums import PlayerRank, SessionPhase, Team

EMPTY_SLOT = ""
SLOT_INDICES = (0, 1)


class CourtModel(BaseModel):
    """Base for all persisted court models."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


def _blank_to_none(value: object) -> object:
    # hosts store unset timestamps as "" rather than null
    if value == "":
        return None
    return value


def _as_utc(value: datetime | None) -> datetime | None:
    # offset-less timestamps are UTC; the engine clock is always aware
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class Player(CourtModel):
    """A registered club player."""

    id: str
    name: str
    rank: PlayerRank
    game_count: int = Field(default=0, ge=0)
    last_game_time: datetime | None = None

    @field_validator("last_game_time", mode="before")
    @classmethod
    def _parse_unset_time(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("last_game_time")
    @classmethod
    def _normalize_time(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class Court(CourtModel):
    """A physical court."""

    id: str
    name: str


class SessionSlots(CourtModel):
    """The four player slots of a session, two per team."""

    team1: tuple[str, str] = (EMPTY_SLOT, EMPTY_SLOT)
    team2: tuple[str, str] = (EMPTY_SLOT, EMPTY_SLOT)

    def team(self, team: Team) -> tuple[str, str]:
        return self.team1 if team is Team.TEAM1 else self.team2

    def get(self, team: Team, slot: int) -> str:
        return self.team(team)[slot]

    def with_slot(self, team: Team, slot: int, player_id: str) -> Self:
        """Return new slots with one position replaced."""
        members = list(self.team(team))
        members[slot] = player_id
        return self.model_copy(update={team.value: (members[0], members[1])})

    def all_ids(self) -> tuple[str, str, str, str]:
        """All four slot values in team1[0], team1[1], team2[0], team2[1] order."""
        return (*self.team1, *self.team2)

    def occupied_ids(self) -> list[str]:
        return [pid for pid in self.all_ids() if pid != EMPTY_SLOT]

    def empty_positions(self) -> list[tuple[Team, int]]:
        return [(team, slot) for team in Team for slot in SLOT_INDICES if self.get(team, slot) == EMPTY_SLOT]

    def is_full(self) -> bool:
        return EMPTY_SLOT not in self.all_ids()


class CourtSession(CourtModel):
    """
    The in-progress (or being-filled) game on a single court.

    At most one exists per court. Slots are mutable only while the session
    is not active or is paused.
    """

    id: str
    court_id: str
    players: SessionSlots = Field(default_factory=SessionSlots)
    start_time: datetime | None = None
    pause_time: datetime | None = None
    end_time: datetime | None = None
    is_active: bool = False
    is_paused: bool = False
    shuttlecock_count: int = Field(default=0, ge=0)

    @field_validator("start_time", "pause_time", "end_time", mode="before")
    @classmethod
    def _parse_unset_times(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("start_time", "pause_time", "end_time")
    @classmethod
    def _normalize_times(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @model_validator(mode="after")
    def _validate_flags(self) -> Self:
        if self.is_paused and not self.is_active:
            raise ValueError("A paused session must be active")
        if self.is_active and self.start_time is None:
            raise ValueError("An active session must have a start time")
        return self

    @property
    def is_locked(self) -> bool:
        """Slots cannot change while a game is being played."""
        return self.is_active and not self.is_paused

    @property
    def phase(self) -> SessionPhase:
        if self.is_active:
            return SessionPhase.PAUSED if self.is_paused else SessionPhase.ACTIVE
        return SessionPhase.READY if self.players.is_full() else SessionPhase.FILLING


class HistoryTeams(CourtModel):
    """Full player snapshots of both teams at session end."""

    team1: tuple[Player, Player]
    team2: tuple[Player, Player]

    def all_players(self) -> tuple[Player, Player, Player, Player]:
        return (*self.team1, *self.team2)


class HistoryRecord(CourtModel):
    """Immutable record of a finished game."""

    id: str
    court_id: str
    court_name: str
    players: HistoryTeams
    start_time: datetime
    end_time: datetime
    shuttlecock_count: int = Field(ge=0)

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_times(cls, value: datetime) -> datetime | None:
        return _as_utc(value)


class CourtState(CourtModel):
    """
    The whole engine state: roster, courts, live sessions and history.

    History is ordered most recent first.
    """

    players: tuple[Player, ...] = ()
    courts: tuple[Court, ...] = ()
    active_sessions: tuple[CourtSession, ...] = ()
    session_history: tuple[HistoryRecord, ...] = ()

    @model_validator(mode="after")
    def _validate_exclusive_slots(self) -> Self:
        seen: set[str] = set()
        for session in self.active_sessions:
            for pid in session.players.occupied_ids():
                if pid in seen:
                    raise ValueError(f"Player {pid} occupies more than one slot")
                seen.add(pid)
        court_ids = [s.court_id for s in self.active_sessions]
        if len(court_ids) != len(set(court_ids)):
            raise ValueError("A court may have at most one session")
        return self

    def find_player(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def find_court(self, court_id: str) -> Court | None:
        return next((c for c in self.courts if c.id == court_id), None)

    def find_session(self, court_id: str) -> CourtSession | None:
        return next((s for s in self.active_sessions if s.court_id == court_id), None)

    def assigned_player_ids(self) -> set[str]:
        """Ids occupying any slot of any session."""
        return {pid for s in self.active_sessions for pid in s.players.occupied_ids()}

    def available_players(self) -> list[Player]:
        """Players not occupying any slot, in roster order."""
        assigned = self.assigned_player_ids()
        return [p for p in self.players if p.id not in assigned]


def session_phase(state: CourtState, court_id: str) -> SessionPhase:
    """Report the lifecycle phase of a court's session."""
    session = state.find_session(court_id)
    if session is None:
        return SessionPhase.EMPTY
    return session.phase
