"""
app/services/scheduled_post_service.py

Scheduling and delivery of one-off messages.

Delivery is at-least-once: a post is marked delivered only after the
delivery callable returns, so a crash in between re-delivers it on the next
run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from app.config import get_scheduler_settings
from db.models.scheduled_post import ScheduledPost
from db.repositories.scheduled_post_repository import ScheduledPostRepository

logger = logging.getLogger(__name__)

DAY_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

DeliverFn = Callable[[ScheduledPost], None]


class ScheduledPostValidationError(ValueError):
    """
    Raised when schedule input is missing, malformed or not in the future.
    """


def log_delivery(post: ScheduledPost) -> None:
    logger.info("Delivering scheduled post id=%s message=%r", post.id, post.message)


@dataclass(frozen=True)
class DeliveryReport:
    due: int = 0
    delivered: int = 0
    failed: int = 0


class ScheduledPostService:
    def __init__(
        self,
        *,
        local_timezone: ZoneInfo | None = None,
        deliver: DeliverFn | None = None,
    ) -> None:
        self._timezone = local_timezone or get_scheduler_settings().timezone
        self._deliver = deliver or log_delivery

    def schedule_post(
        self,
        *,
        db: Session,
        message: str | None,
        day: str | None,
        time: str | None,
        now: datetime | None = None,
    ) -> ScheduledPost:
        """
        Store a pending post for `day` `time` in the configured timezone.
        """

        message_text = (message or "").strip()
        day_text = (day or "").strip()
        time_text = (time or "").strip()
        if not message_text or not day_text or not time_text:
            raise ScheduledPostValidationError("message, day and time are required.")

        scheduled_date = self._parse_schedule(day_text, time_text)
        current = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
        if scheduled_date <= current:
            raise ScheduledPostValidationError("Scheduled time must be in the future.")

        post = ScheduledPostRepository(db).create(message=message_text, scheduled_date=scheduled_date)
        db.commit()
        logger.info("Scheduled post id=%s for %s", post.id, scheduled_date.isoformat())
        return post

    def list_posts(self, *, db: Session) -> list[ScheduledPost]:
        return ScheduledPostRepository(db).list_all()

    def deliver_due_posts(self, *, db: Session, now: datetime | None = None) -> DeliveryReport:
        """
        Deliver every pending post that is due, committing each status change
        before moving to the next post.
        """

        current = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
        repository = ScheduledPostRepository(db)
        due_posts = repository.list_due(now=current)

        delivered = 0
        failed = 0
        for post in due_posts:
            try:
                self._deliver(post)
            except Exception:  # noqa: BLE001
                logger.exception("Delivery failed for scheduled post id=%s", post.id)
                repository.mark_failed(post)
                db.commit()
                failed += 1
                continue

            repository.mark_delivered(post, delivered_at=current)
            db.commit()
            delivered += 1

        return DeliveryReport(due=len(due_posts), delivered=delivered, failed=failed)

    def _parse_schedule(self, day_text: str, time_text: str) -> datetime:
        try:
            day_value = datetime.strptime(day_text, DAY_FORMAT).date()
            time_value = datetime.strptime(time_text, TIME_FORMAT).time()
        except ValueError as exc:
            raise ScheduledPostValidationError(
                "day must be YYYY-MM-DD and time must be HH:MM."
            ) from exc

        local_value = datetime.combine(day_value, time_value, tzinfo=self._timezone)
        return local_value.astimezone(timezone.utc)


@lru_cache(maxsize=1)
def get_scheduled_post_service() -> ScheduledPostService:
    return ScheduledPostService()
