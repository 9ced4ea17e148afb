"""Pipeline settings via pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from leaderboard.exceptions import ConfigurationError

MEMORY_DB_PATH = ":memory:"


class Settings(BaseSettings):
    """Pipeline configuration loaded from environment variables with LEADERBOARD_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="LEADERBOARD_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Store ---
    db_path: str | None = None  # ":memory:" for a transient store
    batch_size: int = Field(default=1000, ge=1)

    # --- Flat data tree ---
    data_path: str | None = None
    source_name: str = "example-scraper"

    # --- Scrape ---
    scrape_days: int = Field(default=1, ge=1)

    # --- Logging ---
    log_level: str = "INFO"
    log_format: str = "console"

    def require_db_path(self) -> str:
        """Return the store path or fail before any work is done."""
        if not self.db_path:
            msg = "LEADERBOARD_DB_PATH environment variable is not set"
            raise ConfigurationError(msg)
        return self.db_path

    def require_data_path(self) -> str:
        """Return the flat data root or fail before any work is done."""
        if not self.data_path:
            msg = "LEADERBOARD_DATA_PATH environment variable is not set"
            raise ConfigurationError(msg)
        return self.data_path


@lru_cache
def get_settings() -> Settings:
    """Get cached pipeline settings."""
    return Settings()
