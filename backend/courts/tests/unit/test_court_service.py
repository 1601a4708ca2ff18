"""
Unit tests for CourtService: result reporting, persistence and time queries.
"""

import json
import logging
import random
from datetime import timedelta

import pytest

from courts.logic.enums import CourtErrorCode, PlayerRank, SessionPhase, Team
from courts.logic.exceptions import UnsupportedSettingsError
from courts.logic.settings import EngineSettings
from courts.logic.timing import format_duration
from courts.persistence import STORE_NAMESPACE, dump_state, parse_state, serialize_state
from courts.service import CourtService
from courts.settings import CourtsSettings
from courts.tests.unit.helpers import B, M, P, T0, FakeClock, full_session_state, make_courts, make_players, make_state
from shared.storage import InMemoryStateStorage


def _service(state=None, **kwargs):
    kwargs.setdefault("rng", random.Random(0))
    kwargs.setdefault("clock", FakeClock())
    return CourtService(state, **kwargs)


class TestResults:
    def test_add_player_reports_new_id(self):
        service = _service()

        result = service.add_player("Alice", "Pro")

        assert result.success is True
        assert result.entity_id == service.players[0].id
        assert service.players[0].rank == PlayerRank.PRO
        assert result.state is service.state

    def test_add_court_reports_new_id(self):
        service = _service()
        result = service.add_court("Court A")
        assert result.entity_id == service.courts[0].id

    def test_rejected_command_leaves_state(self):
        service = _service(make_state(make_players([M, M, M]), make_courts(1)))
        before = service.state

        result = service.start_session("c1")

        assert result.success is False
        assert result.error_code == CourtErrorCode.NOT_FOUND
        assert result.message == "No players assigned to this court"
        assert service.state is before
        assert result.state is before

    def test_rejection_is_logged(self, caplog):
        service = _service(full_session_state(is_active=True))
        with caplog.at_level(logging.WARNING, logger="courts.service"):
            result = service.delete_court("c1")
        assert result.message == "Cannot delete court with active session"
        assert "court command rejected" in caplog.text

    def test_unknown_team_rejected(self):
        service = _service(make_state(make_players([M]), make_courts(1)))
        result = service.assign_player_to_court("c1", "p0", "team3", 0)
        assert result.success is False
        assert result.error_code == CourtErrorCode.INVALID_INPUT

    def test_unknown_rank_rejected(self):
        result = _service().add_player("Alice", "Legend")
        assert result.success is False
        assert result.error_code == CourtErrorCode.INVALID_INPUT

    def test_team_accepts_plain_strings(self):
        service = _service(make_state(make_players([M]), make_courts(1)))
        assert service.assign_player_to_court("c1", "p0", "team2", 1).success
        assert service.get_session("c1").players.team2 == ("", "p0")

    def test_unsupported_settings_rejected(self):
        with pytest.raises(UnsupportedSettingsError):
            _service(settings=EngineSettings(players_per_team=3))


class TestSessionFlow:
    def test_full_game_night(self):
        clock = FakeClock()
        service = _service(clock=clock)
        for name, rank in (("Ann", B), ("Ben", M), ("Cat", M), ("Dan", P), ("Eve", M)):
            service.add_player(name, rank)
        court_id = service.add_court("Court 1").entity_id

        assert service.auto_assign_players(court_id).success
        assert service.get_phase(court_id) == SessionPhase.READY
        assert len(service.available_players()) == 1

        assert service.start_session(court_id).success
        clock.advance(600)
        assert service.elapsed_seconds(court_id) == 600
        service.increment_shuttlecock(court_id)
        service.increment_shuttlecock(court_id)

        assert service.pause_session(court_id).success
        clock.advance(120)
        assert service.elapsed_seconds(court_id) == 600
        assert service.resume_session(court_id).success

        assert service.end_session(court_id, service.get_session(court_id).shuttlecock_count).success
        assert service.get_phase(court_id) == SessionPhase.EMPTY
        assert service.history_summary().total_shuttlecocks == 2
        assert sorted(p.game_count for p in service.players) == [0, 1, 1, 1, 1]

    def test_guard_blocks_changes_until_paused(self):
        service = _service(full_session_state(extra_players=make_players([M], prefix="x")))
        assert service.start_session("c1").success

        blocked = service.remove_player_from_court("c1", Team.TEAM1, 0)
        assert blocked.error_code == CourtErrorCode.GUARD_VIOLATION

        assert service.pause_session("c1").success
        assert service.change_player_in_court("c1", Team.TEAM1, 0).success
        assert service.get_session("c1").players.team1[0] == "x0"

    def test_auto_fill_reports_shortage(self):
        service = _service(make_state(make_players([M, M]), make_courts(1)))
        service.assign_player_to_court("c1", "p0", Team.TEAM1, 0)

        result = service.auto_fill_players("c1")

        assert result.error_code == CourtErrorCode.INSUFFICIENT_PLAYERS
        assert result.message == "Not enough available players. Need 3 but only 1 available."

    def test_elapsed_without_session(self):
        assert _service(make_state(courts=make_courts(1))).elapsed_seconds("c1") == 0

    def test_delete_assigned_player_logs_warning(self, caplog):
        service = _service(full_session_state())
        with caplog.at_level(logging.WARNING, logger="courts.service"):
            assert service.delete_player("p0").success
        assert "still assigned" in caplog.text

    def test_resets(self):
        service = _service(full_session_state(is_active=True))
        assert service.game_reset().success
        assert service.active_sessions == ()
        assert len(service.players) == 4
        assert service.hard_reset().success
        assert service.players == ()
        assert service.courts == ()


class TestPersistence:
    def test_successful_command_is_saved(self):
        storage = InMemoryStateStorage()
        service = _service(storage=storage)

        service.add_player("Alice", "Mid")

        assert parse_state(storage.content) == service.state

    def test_rejected_command_is_not_saved(self):
        storage = InMemoryStateStorage()
        service = _service(storage=storage)
        service.start_session("nope")
        assert storage.content is None

    def test_noop_command_is_not_saved(self):
        storage = InMemoryStateStorage()
        service = _service(full_session_state(), storage=storage)
        assert service.increment_shuttlecock("c1").success
        assert storage.content is None

    def test_from_settings_rehydrates_saved_state(self, tmp_path):
        state_file = tmp_path / "courts.json"
        state_file.write_text(serialize_state(full_session_state(is_active=True)), encoding="utf-8")

        service = CourtService.from_settings(CourtsSettings(state_file=str(state_file)), clock=FakeClock())

        assert service.get_phase("c1") == SessionPhase.ACTIVE
        assert service.pause_session("c1").success
        assert parse_state(state_file.read_text(encoding="utf-8")).find_session("c1").is_paused is True

    def test_from_settings_without_file_starts_empty(self, tmp_path):
        service = CourtService.from_settings(CourtsSettings(state_file=str(tmp_path / "missing.json")))
        assert service.players == ()
        assert service.add_court("Court 1").success
        assert (tmp_path / "missing.json").exists()

    def test_seeded_settings_reproduce_assignment(self, tmp_path):
        def run(name):
            settings = CourtsSettings(state_file=str(tmp_path / name), random_seed=5)
            service = CourtService.from_settings(settings)
            for i in range(8):
                service.add_player(f"Player {i}", "Mid")
            court_id = service.add_court("Court 1").entity_id
            service.auto_assign_players(court_id)
            session = service.get_session(court_id).players
            index = {p.id: i for i, p in enumerate(service.players)}
            return [index[pid] for pid in session.all_ids()]

        assert run("a.json") == run("b.json")


class TestTimeQueries:
    def test_elapsed_display(self):
        clock = FakeClock()
        service = _service(full_session_state(), clock=clock)
        service.start_session("c1")
        clock.advance(725)
        assert service.elapsed_display("c1") == "12:05"

    def test_games_played_by(self):
        service = _service(full_session_state(is_active=True, extra_players=make_players([M], prefix="x")))
        service.end_session("c1", 1)
        assert service.games_played_by("p0") == 1
        assert service.games_played_by("x0") == 0

    def test_offset_less_saved_times_work_with_clock(self, tmp_path):
        document = dump_state(full_session_state(is_active=True))
        document[STORE_NAMESPACE]["state"]["activeSessions"][0]["startTime"] = "2026-10-19T18:00:00"
        state_file = tmp_path / "courts.json"
        state_file.write_text(json.dumps(document), encoding="utf-8")
        clock = FakeClock(T0 + timedelta(minutes=3))

        service = CourtService.from_settings(CourtsSettings(state_file=str(state_file)), clock=clock)

        assert service.elapsed_seconds("c1") == 180
        assert service.end_session("c1", 2).success
        record = service.session_history[0]
        assert format_duration(record.start_time, record.end_time) == "03:00"
