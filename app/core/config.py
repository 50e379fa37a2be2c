from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal
from urllib.parse import quote_plus

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def _database_url_from_parts() -> str | None:
    """Build a postgres URL from DB_HOST/DB_PORT/DB_USER/DB_PASSWORD/DB_NAME.

    Returns None unless both DB_HOST and DB_NAME are set.
    """
    host = _getenv("DB_HOST", "")
    name = _getenv("DB_NAME", "")
    if not host or not name:
        return None

    port_raw = _getenv("DB_PORT", "5432")
    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"DB_PORT must be an integer (got {port_raw!r})") from None

    user = _getenv("DB_USER", "")
    password = os.environ.get("DB_PASSWORD", "")

    auth = ""
    if user:
        auth = quote_plus(user)
        if password:
            auth += ":" + quote_plus(password)
        auth += "@"

    return f"postgresql+asyncpg://{auth}{host}:{port}/{name}"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    port_raw = _getenv("PORT", "8000")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if log_json_raw not in ("true", "false", "1", "0"):
        raise ValueError(f"LOG_JSON must be true|false (got {log_json_raw!r})")

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    # A full DATABASE_URL wins over the individual connection parts.
    database_url = _getenv("DATABASE_URL", "") or _database_url_from_parts()

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in ("true", "1"),
        port=port,
        database_url=database_url,
    )


SETTINGS = load_settings()
