"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_ALLOWED_NOTIFICATION_BACKENDS = {"log", "http"}


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


def _get_float_env(name: str, default: float) -> float:
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
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class BulkImportSettings:
    """
    Runtime settings for roster CSV imports.
    """

    max_file_bytes: int = 5 * 1024 * 1024
    max_reported_errors: int = 1000
    log_row_errors: bool = True


@dataclass(frozen=True)
class PasswordSettings:
    """
    bcrypt cost factor for temporary credentials.
    """

    hash_rounds: int = 12


@dataclass(frozen=True)
class NotificationSettings:
    """
    Welcome-email delivery settings.

    backend "log" writes the message to the application log; "http" posts it
    to a mail relay endpoint.
    """

    backend: str = "log"
    http_url: str | None = None
    http_token: str | None = None
    from_address: str = "no-reply@skillbridge.local"
    login_url: str = "http://localhost:5173/login"
    timeout_seconds: float = 10.0
    max_retries: int = 2
    backoff_seconds: float = 0.5


@lru_cache(maxsize=1)
def get_bulk_import_settings() -> BulkImportSettings:
    """
    Return cached bulk import settings from environment variables.
    """

    return BulkImportSettings(
        max_file_bytes=max(1, _get_int_env("BULK_IMPORT_MAX_FILE_BYTES", 5 * 1024 * 1024)),
        max_reported_errors=max(1, _get_int_env("BULK_IMPORT_MAX_REPORTED_ERRORS", 1000)),
        log_row_errors=_get_bool_env("BULK_IMPORT_LOG_ROW_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_password_settings() -> PasswordSettings:
    # bcrypt accepts cost factors 4..31.
    rounds = _get_int_env("PASSWORD_HASH_ROUNDS", 12)
    return PasswordSettings(hash_rounds=min(31, max(4, rounds)))


@lru_cache(maxsize=1)
def get_notification_settings() -> NotificationSettings:
    """
    Return cached notification settings.

    Raises RuntimeError for an unknown backend, or for the http backend
    without a relay URL.
    """

    backend = _get_str_env("NOTIFICATION_BACKEND", "log").lower()
    if backend not in _ALLOWED_NOTIFICATION_BACKENDS:
        raise RuntimeError(
            f"NOTIFICATION_BACKEND '{backend}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_NOTIFICATION_BACKENDS)}."
        )

    http_url = _get_optional_str_env("NOTIFICATION_HTTP_URL")
    if backend == "http" and not http_url:
        raise RuntimeError("NOTIFICATION_HTTP_URL is required when NOTIFICATION_BACKEND=http.")

    return NotificationSettings(
        backend=backend,
        http_url=http_url,
        http_token=_get_optional_str_env("NOTIFICATION_HTTP_TOKEN"),
        from_address=_get_str_env("NOTIFICATION_FROM_ADDRESS", "no-reply@skillbridge.local"),
        login_url=_get_str_env("LOGIN_URL", "http://localhost:5173/login"),
        timeout_seconds=max(1.0, _get_float_env("NOTIFICATION_TIMEOUT_SECONDS", 10.0)),
        max_retries=max(0, _get_int_env("NOTIFICATION_MAX_RETRIES", 2)),
        backoff_seconds=max(0.0, _get_float_env("NOTIFICATION_BACKOFF_SECONDS", 0.5)),
    )
