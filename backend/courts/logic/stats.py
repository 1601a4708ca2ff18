"""Summary statistics over finished games, surfaced through CourtService."""

from typing import NamedTuple

from courts.logic.state import HistoryRecord


class HistorySummary(NamedTuple):
    total_games: int
    total_shuttlecocks: int
    average_shuttlecocks: float  # per game, one decimal


def history_summary(history: tuple[HistoryRecord, ...] | list[HistoryRecord]) -> HistorySummary:
    total_games = len(history)
    total_shuttlecocks = sum(record.shuttlecock_count for record in history)
    average = round(total_shuttlecocks / total_games, 1) if total_games else 0.0
    return HistorySummary(total_games, total_shuttlecocks, average)


def games_played_by(history: tuple[HistoryRecord, ...] | list[HistoryRecord], player_id: str) -> int:
    """Number of recorded games the player took part in."""
    return sum(1 for record in history if any(p.id == player_id for p in record.players.all_players()))
