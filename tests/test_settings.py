# tests/test_settings.py
"""Tests for configuration loading and logging setup."""

from __future__ import annotations

import logging

import pytest

from gatecha.core.logging_config import HANDLER_NAME, parse_log_level, setup_logging
from gatecha.core.settings import Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("GATECHA_SECRET_KEY", "GATECHA_ADMIN_PASSWORD", "GATECHA_DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)

    config = Settings(_env_file=None)

    assert config.database_url == "sqlite:///./data/gatecha.db"
    assert config.cleanup_interval_seconds == 600.0
    assert config.session_ttl_hours == 24
    assert config.generated_secret_key is True
    assert len(config.secret_key) == 64
    assert config.generated_admin_password is True
    assert config.admin_password


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GATECHA_SECRET_KEY", "configured")
    monkeypatch.setenv("GATECHA_ADMIN_PASSWORD", "hunter2")
    monkeypatch.setenv("GATECHA_CLEANUP_INTERVAL", "5")
    monkeypatch.setenv("GATECHA_CORS_ALLOW_ALL", "true")

    config = Settings(_env_file=None)

    assert config.secret_key == "configured"
    assert config.generated_secret_key is False
    assert config.admin_password == "hunter2"
    assert config.cleanup_interval_seconds == 300.0
    assert config.cors_allow_all is True


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("warn", logging.WARNING),
        ("warning", logging.WARNING),
        ("error", logging.ERROR),
        ("verbose", logging.INFO),
        (None, logging.INFO),
    ],
)
def test_parse_log_level(value: str | None, expected: int) -> None:
    assert parse_log_level(value) == expected


def test_setup_logging_installs_single_handler() -> None:
    root = logging.getLogger()
    previous_level = root.level
    try:
        setup_logging("debug")
        setup_logging("debug")
        ours = [h for h in root.handlers if h.get_name() == HANDLER_NAME]
        assert len(ours) == 1
        assert root.level == logging.DEBUG
    finally:
        for handler in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
            root.removeHandler(handler)
        root.setLevel(previous_level)
