"""
app/api/routers/scheduled_posts.py

Scheduled post endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.schemas.scheduled_posts import (
    SchedulePostRequest,
    ScheduledPostListResponse,
    ScheduledPostResponse,
)
from app.services.scheduled_post_service import (
    ScheduledPostService,
    ScheduledPostValidationError,
    get_scheduled_post_service,
)
from db.session import get_db

router = APIRouter(prefix="/api", tags=["scheduled-posts"])


@router.post(
    "/schedule-post",
    status_code=status.HTTP_201_CREATED,
    response_model=ScheduledPostResponse,
)
def schedule_post(
    payload: SchedulePostRequest,
    db: Session = Depends(get_db),
    post_service: ScheduledPostService = Depends(get_scheduled_post_service),
) -> ScheduledPostResponse:
    try:
        post = post_service.schedule_post(
            db=db,
            message=payload.message,
            day=payload.day,
            time=payload.time,
        )
    except ScheduledPostValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return ScheduledPostResponse.model_validate(post)


@router.get("/scheduled-posts", response_model=ScheduledPostListResponse)
def list_scheduled_posts(
    db: Session = Depends(get_db),
    post_service: ScheduledPostService = Depends(get_scheduled_post_service),
) -> ScheduledPostListResponse:
    posts = post_service.list_posts(db=db)
    return ScheduledPostListResponse(
        posts=[ScheduledPostResponse.model_validate(post) for post in posts]
    )
