import logging

import pytest

from Tierbot.config import Settings
from Tierbot.errors import ConfigurationError
from Tierbot.logging import redact_settings, setup_logging


def test_credentials_from_env():
    s = Settings()
    assert s.discord_app_id == "123456789012345678"
    assert s.bot_token() == "test-bot-token"
    assert s.missing_credentials() == []
    s.require_credentials()


def test_legacy_app_id_env_name(monkeypatch):
    monkeypatch.delenv("DISCORD_APPLICATION_ID", raising=False)
    monkeypatch.setenv("DISCORD_APP_ID", "42")
    assert Settings().discord_app_id == "42"


def test_missing_credentials_reported(monkeypatch):
    for name in ("DISCORD_BOT_TOKEN", "DISCORD_APPLICATION_ID", "DISCORD_PUBLIC_KEY"):
        monkeypatch.delenv(name, raising=False)
    s = Settings()
    assert s.missing_credentials() == [
        "DISCORD_BOT_TOKEN",
        "DISCORD_APPLICATION_ID",
        "DISCORD_PUBLIC_KEY",
    ]
    with pytest.raises(ConfigurationError) as ei:
        s.require_credentials()
    assert ei.value.missing == s.missing_credentials()


def test_settings_are_frozen():
    s = Settings()
    with pytest.raises(Exception):
        s.discord_public_key = "other"  # type: ignore[misc]


def test_toml_defaults_below_env(tmp_path, monkeypatch):
    (tmp_path / "config.toml").write_text(
        "[app]\nenv = 'prod'\n"
        "[store]\ntimeout_seconds = 1.5\n"
        "[logging]\nlevel = 'debug'\nto_file = false\n"
        "[ops]\nmetrics_endpoint_enabled = true\n"
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LOGGING_FILE", raising=False)
    monkeypatch.delenv("LOGGING_CONSOLE", raising=False)
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", "0.5")
    s = Settings()
    assert s.env == "prod"
    assert s.store_timeout_seconds == 0.5
    assert s.logging_file == "NONE"
    assert s.logging_console is None
    assert s.logging_level.upper() == "DEBUG"
    assert s.metrics_endpoint_enabled is True


def test_redact_settings_hides_secrets():
    data = redact_settings(Settings())
    assert data["discord_bot_token"] == "[REDACTED]"
    assert data["discord_public_key"] == "[REDACTED]"
    assert "test-bot-token" not in str(data)
    assert data["env"] == "dev"


def test_env_logging_level_reaches_handlers(monkeypatch):
    monkeypatch.delenv("LOGGING_CONSOLE", raising=False)
    monkeypatch.setenv("LOGGING_LEVEL", "DEBUG")
    s = Settings(logging_file="NONE")
    assert s.logging_console is None
    try:
        setup_logging(s)
        console = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
        assert len(console) == 1
        assert console[0].level == logging.DEBUG
    finally:
        setup_logging(Settings(logging_level="INFO", logging_console="WARNING", logging_file="NONE"))


def test_toml_handler_level_left_unset_follows_env_level(tmp_path, monkeypatch):
    (tmp_path / "config.toml").write_text("[logging]\nlevel = 'INFO'\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LOGGING_CONSOLE", raising=False)
    monkeypatch.setenv("LOGGING_LEVEL", "DEBUG")
    s = Settings()
    assert s.logging_level == "DEBUG"
    assert s.logging_console is None
