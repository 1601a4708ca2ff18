"""Centralized engine settings - the tunable rules of court allocation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from courts.logic.enums import PlayerRank
from courts.logic.exceptions import UnsupportedSettingsError

PLAYERS_PER_TEAM = 2
PLAYERS_PER_COURT = PLAYERS_PER_TEAM * 2


class EngineSettings(BaseModel):
    """
    Configuration for team balancing and player rotation.

    All fields have default values matching the standard club rules.
    """

    model_config = ConfigDict(frozen=True)

    # --- Auto-assign ---
    # top-priority candidates considered by the exhaustive search; C(12,4)*3 = 1485 splits
    auto_assign_pool_size: int = Field(default=12, ge=PLAYERS_PER_COURT)

    # --- Balancing ---
    players_per_team: int = PLAYERS_PER_TEAM
    rank_values: dict[PlayerRank, int] = Field(
        default_factory=lambda: {
            PlayerRank.BEGINNER: 1,
            PlayerRank.MID: 2,
            PlayerRank.PRO: 3,
        },
    )


def validate_settings(settings: EngineSettings) -> None:
    """Validate that all settings values are supported by the engine.

    Raises UnsupportedSettingsError for any value the allocation logic
    does not implement.
    """
    errors: list[str] = []

    if settings.players_per_team != PLAYERS_PER_TEAM:
        errors.append(f"players_per_team={settings.players_per_team} is not supported (doubles only)")

    missing = [rank.value for rank in PlayerRank if rank not in settings.rank_values]
    if missing:
        errors.append(f"rank_values is missing ranks: {', '.join(missing)}")

    if any(value < 0 for value in settings.rank_values.values()):
        errors.append("rank_values must be non-negative")

    if errors:
        raise UnsupportedSettingsError("; ".join(errors))


def rank_value(rank: PlayerRank, settings: EngineSettings) -> int:
    """Numeric proxy for skill used in team balance computation."""
    return settings.rank_values[rank]
