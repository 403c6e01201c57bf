# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a default.
- Tests build their own settings objects instead of reading the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "TASKBOARD"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


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
    log_file_level: str
    quiet_loggers: list[str]
    quiet_log_level: str

    # ---- Session ----
    subject_id: str
    resources: list[str]

    # ---- Cache / refresh ----
    cache_ttl_seconds: float
    refresh_interval_seconds: float
    fetch_timeout_seconds: float
    strict_recency: bool
    multi_subscriber: bool

    # ---- Local data paths ----
    data_dir: Path
    sources_dir: Path
    read_status_db_path: Path
    log_file: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        log_file_level = _env(_k("LOG_FILE_LEVEL"), "DEBUG")
        quiet_loggers = _env_list(_k("QUIET_LOGGERS"), ["taskboard.cache.refresh_scheduler"])
        quiet_log_level = _env(_k("QUIET_LOG_LEVEL"), "WARNING")

        subject_id = _env(_k("SUBJECT_ID"), "").strip()
        resources = _env_list(_k("RESOURCES"), ["delegation", "fms", "checklist", "ht", "pc"])

        cache_ttl_seconds = _env_float(_k("CACHE_TTL_SECONDS"), 15 * 60)
        refresh_interval_seconds = _env_float(_k("REFRESH_INTERVAL_SECONDS"), 15 * 60)
        fetch_timeout_seconds = _env_float(_k("FETCH_TIMEOUT_SECONDS"), 0.0)
        strict_recency = _env_bool(_k("STRICT_RECENCY"), False)
        multi_subscriber = _env_bool(_k("MULTI_SUBSCRIBER"), False)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))
        sources_dir = _env_path(_k("SOURCES_DIR"), data_dir / "sources")
        read_status_db_path = _env_path(_k("READ_STATUS_DB_PATH"), data_dir / "read_status.sqlite3")
        log_file = _env_path(_k("LOG_FILE"), data_dir / "taskboard.log")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_file_level=log_file_level,
            quiet_loggers=quiet_loggers,
            quiet_log_level=quiet_log_level,
            subject_id=subject_id,
            resources=resources,
            cache_ttl_seconds=cache_ttl_seconds,
            refresh_interval_seconds=refresh_interval_seconds,
            fetch_timeout_seconds=fetch_timeout_seconds,
            strict_recency=strict_recency,
            multi_subscriber=multi_subscriber,
            data_dir=data_dir,
            sources_dir=sources_dir,
            read_status_db_path=read_status_db_path,
            log_file=log_file,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
