"""
Process settings read from the environment.

`Settings.from_env()` is called once at startup and the result is passed to
`create_app()`; nothing else reads os.environ.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str = ""
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_file: str = "api.log"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    db_command_timeout_s: float = 30.0

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.environ.get("DATABASE_URL", "").strip(),
            host=_env_str("BOOKS_API_HOST", "0.0.0.0"),
            port=_env_int("BOOKS_API_PORT", 8080),
            debug=_env_bool("BOOKS_API_DEBUG"),
            log_file=_env_str("BOOKS_API_LOG_FILE", "api.log"),
            db_pool_min_size=_env_int("DB_POOL_MIN_SIZE", 1),
            db_pool_max_size=_env_int("DB_POOL_MAX_SIZE", 5),
            db_command_timeout_s=_env_float("DB_COMMAND_TIMEOUT_S", 30.0),
        )

    def require_database_url(self) -> str:
        if not self.database_url:
            raise RuntimeError("DATABASE_URL is not set.")
        return self.database_url
