"""Unit tests for src/core/config.py"""

import logging

import pytest
from pydantic import ValidationError

from src.core.config import Settings, configure_logging, get_settings
from src.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PEGTRACK_SLOTS_PER_LANE", "12")
    monkeypatch.setenv("PEGTRACK_LOG_LEVEL", "debug")
    settings = Settings()
    assert settings.slots_per_lane == 12
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "field, value",
    [
        ("default_player_count", 1),
        ("default_player_count", 9),
        ("slots_per_lane", 0),
        ("pegs_per_player", -1),
        ("log_level", "LOUD"),
    ],
)
def test_invalid_settings(field: str, value: object) -> None:
    with pytest.raises(ValidationError):
        Settings(**{field: value})


def test_get_settings_wraps_validation_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PEGTRACK_DEFAULT_PLAYER_COUNT", "12")
    with pytest.raises(ConfigError):
        get_settings()


def test_configure_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    configure_logging(Settings(log_level="WARNING"))
    assert calls[0]["level"] == "WARNING"
