# src/dday_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Bad values fall back to defaults instead of failing at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "DDAY"

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

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_path: Path
    export_dir: Path

    # ---- Storage ----
    storage_quota_bytes: int
    attachment_max_bytes: int

    # ---- List view ----
    sort_done_by_date: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "dday-todo") or "dday-todo"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/dday"))
        tasks_path = _env_path(_k("TASKS_PATH"), data_dir / "todos.json")
        export_dir = _env_path(_k("EXPORT_DIR"), data_dir / "exports")

        # Roughly what a browser localStorage origin gets. 0 disables the check.
        storage_quota_bytes = _env_int(_k("STORAGE_QUOTA_BYTES"), 5 * 1024 * 1024)
        attachment_max_bytes = _env_int(_k("ATTACHMENT_MAX_BYTES"), 2 * 1024 * 1024)

        sort_done_by_date = _env_bool(_k("SORT_DONE_BY_DATE"), False)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_path=tasks_path,
            export_dir=export_dir,
            storage_quota_bytes=storage_quota_bytes,
            attachment_max_bytes=attachment_max_bytes,
            sort_done_by_date=sort_done_by_date,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
