"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from db.config import (
    get_bool_env,
    get_float_env,
    get_int_env,
    get_str_env,
    load_env_files,
    resolve_project_path,
)

DEFAULT_SESSION_TTL_SECONDS = 30 * 60
DEFAULT_UPLOAD_MAX_BYTES = 50 * 1024 * 1024

SESSION_STORE_BACKENDS = ("database", "file", "memory")


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


@dataclass(frozen=True)
class SheetIngestionSettings:
    """
    Runtime settings for spreadsheet validation and insertion.
    """

    session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS
    session_store_backend: str = "database"
    session_store_dir: str = "data/sessions"
    column_types_path: str = "config/column_types.json"
    strict_numeric: bool = False
    log_validation_errors: bool = True
    upload_max_bytes: int = DEFAULT_UPLOAD_MAX_BYTES


@dataclass(frozen=True)
class APISettings:
    """
    HTTP surface settings.
    """

    cors_allow_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"


@dataclass(frozen=True)
class FrontendSettings:
    """
    Settings used by the Streamlit client when calling the API.
    """

    api_base_url: str = "http://localhost:8000"
    timeout_seconds: float = 60.0


def _resolve_store_backend(raw: str) -> str:
    backend = raw.strip().lower()
    if backend not in SESSION_STORE_BACKENDS:
        raise RuntimeError(
            f"SESSION_STORE_BACKEND '{raw}' is not valid. "
            f"Allowed values: {list(SESSION_STORE_BACKENDS)}."
        )
    return backend


@lru_cache(maxsize=1)
def get_sheet_ingestion_settings() -> SheetIngestionSettings:
    """
    Return cached sheet ingestion settings from environment variables.

    Raises RuntimeError if SESSION_STORE_BACKEND names an unknown backend.
    """

    _load_env_once()
    return SheetIngestionSettings(
        session_ttl_seconds=max(1, get_int_env("SESSION_TTL_SECONDS", DEFAULT_SESSION_TTL_SECONDS)),
        session_store_backend=_resolve_store_backend(get_str_env("SESSION_STORE_BACKEND", "database")),
        session_store_dir=str(resolve_project_path(get_str_env("SESSION_STORE_DIR", "data/sessions"))),
        column_types_path=str(
            resolve_project_path(get_str_env("COLUMN_TYPES_PATH", "config/column_types.json"))
        ),
        strict_numeric=get_bool_env("SHEET_INGEST_STRICT_NUMERIC", False),
        log_validation_errors=get_bool_env("SHEET_INGEST_LOG_VALIDATION_ERRORS", True),
        upload_max_bytes=max(1, get_int_env("UPLOAD_MAX_BYTES", DEFAULT_UPLOAD_MAX_BYTES)),
    )


@lru_cache(maxsize=1)
def get_api_settings() -> APISettings:
    """
    Return cached HTTP settings.
    """

    _load_env_once()
    raw_origins = get_str_env("CORS_ALLOW_ORIGINS", "*")
    origins = tuple(origin.strip() for origin in raw_origins.split(",") if origin.strip())
    return APISettings(
        cors_allow_origins=origins or ("*",),
        log_level=get_str_env("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_frontend_settings() -> FrontendSettings:
    """
    Return cached Streamlit client settings.
    """

    _load_env_once()
    return FrontendSettings(
        api_base_url=get_str_env("API_BASE_URL", "http://localhost:8000").rstrip("/"),
        timeout_seconds=max(1.0, get_float_env("API_TIMEOUT_SECONDS", 60.0)),
    )
