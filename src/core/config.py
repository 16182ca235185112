"""Application settings (read from environment variables / .env file) and logging setup."""

import logging
from functools import lru_cache

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.exceptions import ConfigError

MIN_PLAYERS = 2
MAX_PLAYERS = 8
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Every field can be overridden with a PEGTRACK_ prefixed environment variable."""

    model_config = SettingsConfigDict(env_prefix="PEGTRACK_", env_file=".env")

    database_url: str = "sqlite:///./pegtrack.db"
    default_player_count: int = 4
    slots_per_lane: int = 18
    pegs_per_player: int = 5
    exact_home: bool = True
    last_game_key: str = "pegtrack.lastGameId"
    log_level: str = "INFO"

    @field_validator("default_player_count")
    @classmethod
    def validate_player_count(cls, value: int) -> int:
        if not MIN_PLAYERS <= value <= MAX_PLAYERS:
            raise ValueError(
                f"default_player_count must be within [{MIN_PLAYERS}, {MAX_PLAYERS}], got {value}"
            )
        return value

    @field_validator("slots_per_lane", "pegs_per_player")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"Expected a positive number, got {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level


@lru_cache()
def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid pegtrack settings: {exc}") from exc


def configure_logging(settings: Settings | None = None) -> None:
    """Set up root logging once at application start."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
