from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate all required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - A database URL must be configured (DATABASE_URL, CLOUD_DATABASE_URL
      or LOCAL_DATABASE_URL), and it must point at PostgreSQL.
    - NOTIFICATION_BACKEND must be 'log' or 'http'; 'http' needs
      NOTIFICATION_HTTP_URL.
    - PASSWORD_HASH_ROUNDS, when set, must be an integer.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Database URL ---------------------------------------------------
    database_url = (
        os.getenv("DATABASE_URL", "").strip()
        or os.getenv("CLOUD_DATABASE_URL", "").strip()
        or os.getenv("LOCAL_DATABASE_URL", "").strip()
    )
    if not database_url:
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL or LOCAL_DATABASE_URL."
        )
    elif not database_url.startswith(("postgres://", "postgresql")):
        errors.append("Database URL must point at PostgreSQL. SQLite is not permitted.")

    # --- Notifications --------------------------------------------------
    backend = os.getenv("NOTIFICATION_BACKEND", "log").strip().lower() or "log"
    if backend not in {"log", "http"}:
        errors.append(
            f"NOTIFICATION_BACKEND='{backend}' is not valid. Allowed values: ['http', 'log']."
        )
    elif backend == "http" and not os.getenv("NOTIFICATION_HTTP_URL", "").strip():
        errors.append(
            "NOTIFICATION_HTTP_URL is not set but NOTIFICATION_BACKEND is 'http'."
        )

    # --- Password hashing -----------------------------------------------
    rounds_raw = os.getenv("PASSWORD_HASH_ROUNDS", "").strip()
    if rounds_raw and not rounds_raw.isdigit():
        errors.append(f"PASSWORD_HASH_ROUNDS='{rounds_raw}' is not an integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed. Missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every table registered on Base.metadata must exist in the database.
    If any are missing, log a critical error and abort startup so that
    the operator is forced to run migrations before serving traffic.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="SkillBridge Bulk Import API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import bulk_upload_router

    application.include_router(bulk_upload_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
