"""
Persistence helpers for scheduled posts.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.scheduled_post import ScheduledPost, ScheduledPostStatus


class ScheduledPostRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, *, message: str, scheduled_date: datetime) -> ScheduledPost:
        post = ScheduledPost(
            message=message,
            scheduled_date=scheduled_date,
            status=ScheduledPostStatus.PENDING,
        )
        self._session.add(post)
        self._session.flush()
        self._session.refresh(post)
        return post

    def list_all(self) -> list[ScheduledPost]:
        stmt = select(ScheduledPost).order_by(ScheduledPost.scheduled_date.asc())
        return list(self._session.scalars(stmt).all())

    def list_due(self, *, now: datetime) -> list[ScheduledPost]:
        """
        Pending posts whose scheduled time is at or before `now`, oldest first.
        """

        stmt = (
            select(ScheduledPost)
            .where(
                ScheduledPost.status == ScheduledPostStatus.PENDING,
                ScheduledPost.scheduled_date <= now,
            )
            .order_by(ScheduledPost.scheduled_date.asc())
        )
        return list(self._session.scalars(stmt).all())

    def mark_delivered(self, post: ScheduledPost, *, delivered_at: datetime) -> ScheduledPost:
        post.status = ScheduledPostStatus.DELIVERED
        post.delivered_at = delivered_at
        return post

    def mark_failed(self, post: ScheduledPost) -> ScheduledPost:
        post.status = ScheduledPostStatus.FAILED
        return post
