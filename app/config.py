"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_timezone_env(name: str, default: str) -> ZoneInfo:
    """
    Read an IANA timezone name; unknown names fall back to `default`.
    """

    try:
        return ZoneInfo(_get_str_env(name, default))
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(default)


@dataclass(frozen=True)
class CSVIngestionSettings:
    """
    Runtime settings for policy CSV ingestion.
    """

    max_workers: int = 2
    encoding: str = "utf-8-sig"
    max_upload_bytes: int = 50 * 1024 * 1024


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Runtime settings for scheduled post delivery.
    """

    enabled: bool = True
    timezone: ZoneInfo = ZoneInfo("UTC")
    misfire_grace_seconds: int = 30


@lru_cache(maxsize=1)
def get_csv_ingestion_settings() -> CSVIngestionSettings:
    """
    Return cached CSV ingestion settings from environment variables.
    """

    return CSVIngestionSettings(
        max_workers=max(1, _get_int_env("CSV_INGEST_MAX_WORKERS", 2)),
        encoding=_get_str_env("CSV_INGEST_ENCODING", "utf-8-sig"),
        max_upload_bytes=max(1, _get_int_env("CSV_INGEST_MAX_UPLOAD_BYTES", 50 * 1024 * 1024)),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    """
    Return cached scheduler settings from environment variables.
    """

    return SchedulerSettings(
        enabled=_get_bool_env("SCHEDULER_ENABLED", True),
        timezone=_get_timezone_env("SCHEDULER_TIMEZONE", "UTC"),
        misfire_grace_seconds=max(1, _get_int_env("SCHEDULER_MISFIRE_GRACE_SECONDS", 30)),
    )
