"""Court engine host configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings

from courts.logic.settings import EngineSettings


class CourtsSettings(BaseSettings):
    model_config = {"env_prefix": "COURTS_", "env_file": ".env", "extra": "ignore"}

    # JSON document holding players, courts, live sessions and history
    state_file: str = Field(default="backend/data/courts.json", min_length=1)
    log_dir: str = Field(default="backend/logs/courts", min_length=1)

    auto_assign_pool_size: int = Field(default=12, ge=4)

    # Fixed seed makes auto-assign tie-breaks reproducible; None draws from OS entropy
    random_seed: int | None = None

    def engine_settings(self) -> EngineSettings:
        return EngineSettings(auto_assign_pool_size=self.auto_assign_pool_size)
