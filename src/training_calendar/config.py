"""Configuration settings for the training calendar."""

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from .units import DistanceUnit


# __file__ = src/training_calendar/config.py
# .parent.parent = project root
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent


class Settings(BaseSettings):
    """Settings loaded from TRAINING_CALENDAR_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRAINING_CALENDAR_",
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Session persistence
    session_db_path: Path | None = None

    # Display
    default_unit: DistanceUnit = DistanceUnit.KM

    # Export
    export_indent: int = 2

    # Logging
    log_level: str = "INFO"

    def model_post_init(self, __context) -> None:
        """Set default database path after initialization."""
        if self.session_db_path is None:
            self.session_db_path = Path.home() / ".training-calendar" / "session.db"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
