"""
app/schemas/scheduled_posts.py

Request and response schemas for scheduled posts.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SchedulePostRequest(BaseModel):
    """
    Fields are optional here so that missing values surface as 400, not 422.
    """

    message: str | None = None
    day: str | None = Field(default=None, description="YYYY-MM-DD")
    time: str | None = Field(default=None, description="HH:MM")


class ScheduledPostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    message: str
    scheduled_date: datetime
    status: str
    created_at: datetime
    updated_at: datetime
    delivered_at: datetime | None = None


class ScheduledPostListResponse(BaseModel):
    posts: list[ScheduledPostResponse] = Field(default_factory=list)
