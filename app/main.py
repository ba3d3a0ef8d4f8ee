from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.
    """

    from db.config import CLOUD_LIKE_ENVIRONMENTS, load_env_files

    load_env_files()

    errors: list[str] = []

    database_url = os.getenv("DATABASE_URL", "").strip()
    cloud_database_url = os.getenv("CLOUD_DATABASE_URL", "").strip()
    local_database_url = os.getenv("LOCAL_DATABASE_URL", "").strip()
    if not database_url and not cloud_database_url and not local_database_url:
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL "
            "or LOCAL_DATABASE_URL."
        )

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    if (
        environment in CLOUD_LIKE_ENVIRONMENTS
        and not database_url
        and not cloud_database_url
    ):
        errors.append(
            f"ENVIRONMENT='{environment}' requires DATABASE_URL or CLOUD_DATABASE_URL."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
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
    from sqlalchemy.exc import SQLAlchemyError

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity, start the scheduler on boot; stop it and the worker pool on exit."""
    log = logging.getLogger(__name__)

    _check_db()
    log.info("Database connectivity confirmed")

    from app.config import get_scheduler_settings
    from app.scheduler.jobs import build_scheduler
    from app.services.ingestion_worker import get_ingestion_worker_pool

    scheduler = None
    if get_scheduler_settings().enabled:
        scheduler = build_scheduler()
        scheduler.start()
        log.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    else:
        log.info("Scheduler disabled by SCHEDULER_ENABLED")

    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=True)
            log.info("Scheduler shut down")
        if get_ingestion_worker_pool.cache_info().currsize:
            get_ingestion_worker_pool().shutdown(wait=True)
            log.info("Ingestion worker pool shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Policy Ingestion API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import (
        policies_router,
        scheduled_posts_router,
        upload_router,
    )

    application.include_router(upload_router)
    application.include_router(policies_router)
    application.include_router(scheduled_posts_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
