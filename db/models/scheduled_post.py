"""
db/models/scheduled_post.py

A message to be delivered once its scheduled time has passed.
Only the delivery job mutates status after creation.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class ScheduledPostStatus:
    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"

    ALL = frozenset({PENDING, DELIVERED, FAILED})


class ScheduledPost(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "scheduled_posts"

    message: Mapped[str] = mapped_column(Text, nullable=False)
    scheduled_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=ScheduledPostStatus.PENDING,
        comment="pending, delivered, failed",
    )
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_scheduled_posts_status_scheduled_date", "status", "scheduled_date"),
    )

    def __repr__(self) -> str:
        return f"<ScheduledPost id={self.id} status={self.status!r} scheduled_date={self.scheduled_date}>"
