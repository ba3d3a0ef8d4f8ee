"""
app/scheduler/jobs.py

APScheduler-based delivery of scheduled posts.

Schedule
--------
  deliver_scheduled_posts: every minute, in SCHEDULER_TIMEZONE

Lifecycle
---------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_scheduler_settings
from app.services.scheduled_post_service import get_scheduled_post_service
from db.session import SessionLocal

logger = logging.getLogger(__name__)

DELIVER_SCHEDULED_POSTS_JOB_ID = "deliver_scheduled_posts"


@contextmanager
def _session_scope() -> Iterator[Session]:
    """Yield a fresh session and ensure it is closed on exit."""
    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def run_deliver_scheduled_posts() -> None:
    """
    Deliver every pending post whose scheduled time has passed.
    Commits per post; a database failure rolls back the current post only.
    """
    logger.info("Scheduler: deliver_scheduled_posts starting")

    with _session_scope() as db:
        try:
            report = get_scheduled_post_service().deliver_due_posts(db=db)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Scheduler: deliver_scheduled_posts failed")
            return

    logger.info(
        "Scheduler: deliver_scheduled_posts complete due=%d delivered=%d failed=%d",
        report.due,
        report.delivered,
        report.failed,
    )


def build_scheduler() -> BackgroundScheduler:
    """
    Build and register the delivery job.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    settings = get_scheduler_settings()
    scheduler = BackgroundScheduler(timezone=settings.timezone)

    scheduler.add_job(
        run_deliver_scheduled_posts,
        trigger="cron",
        minute="*",
        id=DELIVER_SCHEDULED_POSTS_JOB_ID,
        name="Scheduled post delivery",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=settings.misfire_grace_seconds,
    )

    return scheduler
