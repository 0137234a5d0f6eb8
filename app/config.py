"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_CSV_ENCODINGS: tuple[str, ...] = ("utf-8-sig", "cp1252", "latin-1")


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


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


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
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


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_csv_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list from environment variables.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    items = tuple(item.strip() for item in raw_value.split(",") if item.strip())
    return items


@dataclass(frozen=True)
class DashboardSettings:
    """
    Runtime settings for CSV loading and analysis.
    """

    data_dir: str = "data"
    data_base_url: str | None = None
    http_timeout_seconds: float = 15.0
    csv_encodings: tuple[str, ...] = DEFAULT_CSV_ENCODINGS
    date_sample_size: int = 100
    batch_pause_seconds: float = 0.0
    day_first_files: tuple[str, ...] = ()
    load_on_startup: bool = True


@lru_cache(maxsize=1)
def get_dashboard_settings() -> DashboardSettings:
    """
    Return cached dashboard settings from the environment.
    """

    encodings = _get_csv_list_env("DASHBOARD_CSV_ENCODINGS", DEFAULT_CSV_ENCODINGS)
    return DashboardSettings(
        data_dir=_get_str_env("DASHBOARD_DATA_DIR", "data"),
        data_base_url=_get_optional_str_env("DASHBOARD_DATA_BASE_URL"),
        http_timeout_seconds=max(1.0, _get_float_env("DASHBOARD_HTTP_TIMEOUT_SECONDS", 15.0)),
        csv_encodings=encodings or DEFAULT_CSV_ENCODINGS,
        date_sample_size=max(1, _get_int_env("DASHBOARD_DATE_SAMPLE_SIZE", 100)),
        batch_pause_seconds=max(0.0, _get_float_env("DASHBOARD_BATCH_PAUSE_SECONDS", 0.0)),
        day_first_files=_get_csv_list_env("DASHBOARD_DAY_FIRST_FILES", ()),
        load_on_startup=_get_bool_env("DASHBOARD_LOAD_ON_STARTUP", True),
    )
