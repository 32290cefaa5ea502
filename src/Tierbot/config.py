"""Settings loader for Tierbot."""

from pathlib import Path
from typing import Any

import tomllib
from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from Tierbot.errors import ConfigurationError


def _toml_settings_source() -> dict[str, Any]:
    """Load settings from config.toml with keys mapped to Settings fields.

    This source has LOWER priority than env/.env so those can override TOML.
    """
    cfg_path = Path("config.toml")
    if not cfg_path.exists():
        return {}
    with cfg_path.open("rb") as f:
        t = tomllib.load(f)

    app_cfg = t.get("app", {}) or {}
    discord_cfg = t.get("discord", {}) or {}
    store_cfg = t.get("store", {}) or {}
    log_cfg = t.get("logging", {}) or {}
    ops_cfg = t.get("ops", {}) or {}

    out: dict[str, Any] = {
        "env": app_cfg.get("env", "dev"),
        "discord_api_base": discord_cfg.get("api_base", "https://discord.com/api/v10"),
        "registration_timeout_seconds": discord_cfg.get("registration_timeout_seconds", 10),
        "store_timeout_seconds": store_cfg.get("timeout_seconds", 2.5),
        "logging_level": log_cfg.get("level", "INFO"),
        "logging_file_path": log_cfg.get("file_path", "logs/tierbot.jsonl"),
        "logging_max_bytes": log_cfg.get("max_bytes", 5_000_000),
        "logging_backup_count": log_cfg.get("backup_count", 5),
        "metrics_endpoint_enabled": ops_cfg.get("metrics_endpoint_enabled", False),
    }
    if "database_url" in store_cfg:
        out["database_url"] = store_cfg["database_url"]

    # Per-handler levels: INFO|DEBUG|WARNING|ERROR|CRITICAL|NONE, or a bool.
    # Unset (or true) leaves the handler following logging_level.
    def _norm_level(v):
        if isinstance(v, str):
            return v.upper()
        if v is False:
            return "NONE"
        return None

    for field, key in (("logging_console", "console"), ("logging_file", "to_file")):
        lvl = _norm_level(log_cfg.get(key))
        if lvl is not None:
            out[field] = lvl
    return out


class Settings(BaseSettings):
    env: str = Field(default="dev")
    database_url: str = Field(default="sqlite+aiosqlite:///./tierbot.sqlite3")

    # --- Discord Credentials ---
    discord_app_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("discord_application_id", "discord_app_id"),
    )
    # Hex-encoded Ed25519 public key from the Developer Portal
    discord_public_key: str = ""
    discord_bot_token: SecretStr | None = None
    discord_api_base: str = "https://discord.com/api/v10"

    # --- Deadlines ---
    store_timeout_seconds: float = 2.5
    registration_timeout_seconds: float = 10.0
    app_port: int = 18000

    # --- Logging ---
    logging_enabled: bool = True
    logging_level: str = "INFO"
    # Per-handler levels; None follows logging_level
    logging_console: str | None = None
    logging_file: str | None = None
    logging_file_path: str = "logs/tierbot.jsonl"
    logging_max_bytes: int = 5_000_000
    logging_backup_count: int = 5

    # --- Ops ---
    metrics_endpoint_enabled: bool = False

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Precedence (highest to lowest):
        # 1) init_settings (explicit overrides in code/tests)
        # 2) dotenv (.env in cwd)
        # 3) env_settings (OS env)
        # 4) TOML (config.toml) project defaults
        # 5) file_secret_settings
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            _toml_settings_source,
            file_secret_settings,
        )

    def bot_token(self) -> str:
        return self.discord_bot_token.get_secret_value() if self.discord_bot_token else ""

    def missing_credentials(self) -> list[str]:
        """Names of the required Discord secrets that are absent or blank."""
        missing: list[str] = []
        if not self.bot_token():
            missing.append("DISCORD_BOT_TOKEN")
        if not (self.discord_app_id or "").strip():
            missing.append("DISCORD_APPLICATION_ID")
        if not self.discord_public_key.strip():
            missing.append("DISCORD_PUBLIC_KEY")
        return missing

    def require_credentials(self) -> None:
        missing = self.missing_credentials()
        if missing:
            raise ConfigurationError(missing)


def load_settings() -> Settings:
    return Settings()
