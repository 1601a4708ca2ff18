"""
Court service: the command and query surface for hosts.

Holds the current CourtState and applies each command as a whole-state
replacement. Transition functions raise CourtRuleError on rejection; the
service converts those into failed ActionResults so the caller can surface
the message, and the stored state stays exactly as it was. Successful
commands are persisted (when storage is configured) before the new state
becomes current.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

import structlog

from courts.logic import assignment, lifecycle, reset, roster
from courts.logic.action_result import ActionResult
from courts.logic.enums import CourtAction, PlayerRank, SessionPhase, Team
from courts.logic.exceptions import CourtRuleError, InvalidInputError
from courts.logic.settings import EngineSettings, validate_settings
from courts.logic.state import Court, CourtSession, CourtState, HistoryRecord, Player, session_phase
from courts.logic.stats import HistorySummary, games_played_by, history_summary
from courts.logic.timing import Clock, elapsed_seconds, format_elapsed, utc_now
from courts.persistence import parse_state, serialize_state
from shared.storage import LocalStateStorage

if TYPE_CHECKING:
    from collections.abc import Callable

    from courts.settings import CourtsSettings
    from shared.storage import StateStorage

logger = structlog.get_logger()


def _coerce_team(team: Team | str) -> Team:
    try:
        return Team(team)
    except ValueError:
        raise InvalidInputError(f"Unknown team {team!r}") from None


def _coerce_rank(rank: PlayerRank | str) -> PlayerRank:
    try:
        return PlayerRank(rank)
    except ValueError:
        raise InvalidInputError(f"Unknown rank {rank!r}") from None


class CourtService:
    """
    Stateful facade over the pure court transition functions.

    Single-threaded: each command runs to completion before the next. Hosts
    adding concurrent access must serialize calls around this object.
    """

    def __init__(
        self,
        state: CourtState | None = None,
        *,
        settings: EngineSettings | None = None,
        rng: random.Random | None = None,
        clock: Clock = utc_now,
        storage: StateStorage | None = None,
    ) -> None:
        self._settings = settings or EngineSettings()
        validate_settings(self._settings)
        self._state = state if state is not None else CourtState()
        self._rng = rng or random.Random()  # noqa: S311
        self._clock = clock
        self._storage = storage

    @classmethod
    def from_settings(cls, settings: CourtsSettings, *, clock: Clock = utc_now) -> CourtService:
        """Build a service backed by the configured state file, rehydrating saved state."""
        storage = LocalStateStorage(settings.state_file)
        content = storage.load()
        state = parse_state(content) if content is not None else CourtState()
        logger.info(
            "court state loaded",
            path=settings.state_file,
            players=len(state.players),
            courts=len(state.courts),
            sessions=len(state.active_sessions),
        )
        return cls(
            state,
            settings=settings.engine_settings(),
            rng=random.Random(settings.random_seed),  # noqa: S311
            clock=clock,
            storage=storage,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> CourtState:
        return self._state

    @property
    def players(self) -> tuple[Player, ...]:
        return self._state.players

    @property
    def courts(self) -> tuple[Court, ...]:
        return self._state.courts

    @property
    def active_sessions(self) -> tuple[CourtSession, ...]:
        return self._state.active_sessions

    @property
    def session_history(self) -> tuple[HistoryRecord, ...]:
        return self._state.session_history

    def get_session(self, court_id: str) -> CourtSession | None:
        return self._state.find_session(court_id)

    def get_phase(self, court_id: str) -> SessionPhase:
        return session_phase(self._state, court_id)

    def available_players(self) -> list[Player]:
        return self._state.available_players()

    def elapsed_seconds(self, court_id: str) -> int:
        """Seconds played on the court's session so far (0 if none is running)."""
        session = self._state.find_session(court_id)
        if session is None:
            return 0
        return elapsed_seconds(session, self._clock())

    def elapsed_display(self, court_id: str) -> str:
        """Running timer text for a court, e.g. '12:05'."""
        return format_elapsed(self.elapsed_seconds(court_id))

    def history_summary(self) -> HistorySummary:
        return history_summary(self._state.session_history)

    def games_played_by(self, player_id: str) -> int:
        return games_played_by(self._state.session_history, player_id)

    # ------------------------------------------------------------------
    # Command plumbing
    # ------------------------------------------------------------------

    def _apply(
        self,
        action: CourtAction,
        transition: Callable[[CourtState], CourtState],
        **context: object,
    ) -> ActionResult:
        try:
            new_state = transition(self._state)
        except CourtRuleError as e:
            logger.warning("court command rejected", action=action, code=e.code, reason=e.message, **context)
            return ActionResult(False, self._state, e.message, e.code)

        if self._storage is not None and new_state is not self._state:
            self._storage.save(serialize_state(new_state))
        self._state = new_state
        logger.info("court command applied", action=action, **context)
        return ActionResult(True, new_state)

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    def add_player(self, name: str, rank: PlayerRank | str) -> ActionResult:
        created: list[Player] = []

        def transition(state: CourtState) -> CourtState:
            state, player = roster.add_player(state, name, _coerce_rank(rank))
            created.append(player)
            return state

        result = self._apply(CourtAction.ADD_PLAYER, transition, name=name)
        return result._replace(entity_id=created[0].id) if result.success else result

    def update_player(self, player: Player) -> ActionResult:
        return self._apply(
            CourtAction.UPDATE_PLAYER,
            lambda s: roster.update_player(s, player),
            player_id=player.id,
        )

    def delete_player(self, player_id: str) -> ActionResult:
        if player_id in self._state.assigned_player_ids():
            logger.warning("deleting player still assigned to a court", player_id=player_id)
        return self._apply(
            CourtAction.DELETE_PLAYER,
            lambda s: roster.delete_player(s, player_id),
            player_id=player_id,
        )

    def add_court(self, name: str) -> ActionResult:
        created: list[Court] = []

        def transition(state: CourtState) -> CourtState:
            state, court = roster.add_court(state, name)
            created.append(court)
            return state

        result = self._apply(CourtAction.ADD_COURT, transition, name=name)
        return result._replace(entity_id=created[0].id) if result.success else result

    def delete_court(self, court_id: str) -> ActionResult:
        return self._apply(
            CourtAction.DELETE_COURT,
            lambda s: roster.delete_court(s, court_id),
            court_id=court_id,
        )

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def assign_player_to_court(self, court_id: str, player_id: str, team: Team | str, slot: int) -> ActionResult:
        return self._apply(
            CourtAction.ASSIGN_PLAYER,
            lambda s: lifecycle.assign_player_to_court(s, court_id, player_id, _coerce_team(team), slot),
            court_id=court_id,
            player_id=player_id,
            team=team,
            slot=slot,
        )

    def remove_player_from_court(self, court_id: str, team: Team | str, slot: int) -> ActionResult:
        return self._apply(
            CourtAction.REMOVE_PLAYER,
            lambda s: lifecycle.remove_player_from_court(s, court_id, _coerce_team(team), slot),
            court_id=court_id,
            team=team,
            slot=slot,
        )

    def start_session(self, court_id: str) -> ActionResult:
        return self._apply(
            CourtAction.START_SESSION,
            lambda s: lifecycle.start_session(s, court_id, self._clock()),
            court_id=court_id,
        )

    def pause_session(self, court_id: str) -> ActionResult:
        return self._apply(
            CourtAction.PAUSE_SESSION,
            lambda s: lifecycle.pause_session(s, court_id, self._clock()),
            court_id=court_id,
        )

    def resume_session(self, court_id: str) -> ActionResult:
        return self._apply(
            CourtAction.RESUME_SESSION,
            lambda s: lifecycle.resume_session(s, court_id),
            court_id=court_id,
        )

    def end_session(self, court_id: str, shuttlecock_count: int) -> ActionResult:
        return self._apply(
            CourtAction.END_SESSION,
            lambda s: lifecycle.end_session(s, court_id, shuttlecock_count, self._clock())[0],
            court_id=court_id,
            shuttlecock_count=shuttlecock_count,
        )

    def increment_shuttlecock(self, court_id: str) -> ActionResult:
        return self._apply(
            CourtAction.INCREMENT_SHUTTLECOCK,
            lambda s: lifecycle.increment_shuttlecock(s, court_id),
            court_id=court_id,
        )

    def decrement_shuttlecock(self, court_id: str) -> ActionResult:
        return self._apply(
            CourtAction.DECREMENT_SHUTTLECOCK,
            lambda s: lifecycle.decrement_shuttlecock(s, court_id),
            court_id=court_id,
        )

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def auto_assign_players(self, court_id: str) -> ActionResult:
        return self._apply(
            CourtAction.AUTO_ASSIGN,
            lambda s: assignment.auto_assign_players(s, court_id, self._rng, self._settings),
            court_id=court_id,
        )

    def auto_fill_players(self, court_id: str) -> ActionResult:
        return self._apply(
            CourtAction.AUTO_FILL,
            lambda s: assignment.auto_fill_players(s, court_id, self._rng, self._settings),
            court_id=court_id,
        )

    def change_player_in_court(self, court_id: str, team: Team | str, slot: int) -> ActionResult:
        return self._apply(
            CourtAction.CHANGE_PLAYER,
            lambda s: assignment.change_player_in_court(s, court_id, _coerce_team(team), slot, self._settings),
            court_id=court_id,
            team=team,
            slot=slot,
        )

    # ------------------------------------------------------------------
    # Resets
    # ------------------------------------------------------------------

    def hard_reset(self) -> ActionResult:
        return self._apply(CourtAction.HARD_RESET, reset.hard_reset)

    def game_reset(self) -> ActionResult:
        return self._apply(CourtAction.GAME_RESET, reset.game_reset)
