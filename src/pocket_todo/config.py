# src/pocket_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every key has a default.

Environment (all optional, prefix POCKET_TODO_):
- APP_NAME          display name (default: pocket-todo)
- LOG_LEVEL         console log level (default: INFO)
- DATA_DIR          where the SQLite file and logs live (default: .local/pocket_todo)
- DB_NAME           store name, file is <DATA_DIR>/<DB_NAME>.sqlite3 (default: TodoDB)
- DB_VERSION        schema version to open with (default: 2)
- PERSIST           false -> no persistent store, ephemeral session only (default: true)
- DEFAULT_CATEGORY  category slug for /add without #category (default: default)
- SORT_KEY          date-added | priority | alphabetical (default: date-added)
- SORT_ORDER        asc | desc (default: asc)
- SHARE_BASE_URL    URL share links are built on (default: http://localhost:8000/)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "POCKET_TODO"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    persist: bool
    data_dir: Path
    db_name: str
    db_version: int

    # ---- Front end defaults ----
    default_category: str
    sort_key: str
    sort_order: str

    # ---- Sharing ----
    share_base_url: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "pocket-todo").strip() or "pocket-todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        persist = _env_bool(_k("PERSIST"), True)
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/pocket_todo"))
        db_name = _env(_k("DB_NAME"), "TodoDB").strip() or "TodoDB"
        db_version = max(1, _env_int(_k("DB_VERSION"), 2))

        default_category = _env(_k("DEFAULT_CATEGORY"), "default").strip() or "default"
        sort_key = _env(_k("SORT_KEY"), "date-added").strip().lower()
        sort_order = _env(_k("SORT_ORDER"), "asc").strip().lower()

        share_base_url = _env(_k("SHARE_BASE_URL"), "http://localhost:8000/")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            persist=persist,
            data_dir=data_dir,
            db_name=db_name,
            db_version=db_version,
            default_category=default_category,
            sort_key=sort_key,
            sort_order=sort_order,
            share_base_url=share_base_url,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
