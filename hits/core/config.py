from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]


def _getenv(name: str, default: str) -> str:
    # Values are stripped, so "PORT= 3030 " still parses.
    return os.environ.get(name, default).strip()


def _parse_font_paths(raw: str) -> dict[str, str]:
    """Parse ``FONT_PATHS`` (``verdana=/fonts/a.ttf,helvetica=/fonts/b.ttf``)."""
    paths: dict[str, str] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, path = item.partition("=")
        if not sep or not name.strip() or not path.strip():
            raise ValueError(
                f"FONT_PATHS entries must look like name=/path/to/font.ttf (got {item!r})"
            )
        paths[name.strip().lower()] = path.strip()
    return paths


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    host: str
    port: int
    database_url: str | None
    redis_url: str | None
    fanout_capacity: int = 100
    font_paths: dict[str, str] = field(default_factory=dict)

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    port_raw = _getenv("PORT", "3030")
    capacity_raw = _getenv("FANOUT_CAPACITY", "100")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    try:
        fanout_capacity = int(capacity_raw)
    except ValueError:
        raise ValueError(
            f"FANOUT_CAPACITY must be an integer (got {capacity_raw!r})"
        ) from None
    if fanout_capacity <= 0:
        raise ValueError(f"FANOUT_CAPACITY must be positive (got {fanout_capacity})")

    database_url = _getenv("DATABASE_URL", "") or None
    redis_url = _getenv("REDIS_URL", "") or None

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in ("1", "true", "yes"),
        host=_getenv("HOST", "0.0.0.0"),
        port=port,
        database_url=database_url,
        redis_url=redis_url,
        fanout_capacity=fanout_capacity,
        font_paths=_parse_font_paths(_getenv("FONT_PATHS", "")),
    )


# Read once at import time; tests that need other values call load_settings().
SETTINGS = load_settings()
