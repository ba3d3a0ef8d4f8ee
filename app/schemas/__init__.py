"""
app/schemas package marker.
"""

from app.schemas.ingestion import (
    IngestionErrorDetail,
    IngestionJobListResponse,
    IngestionJobResponse,
    IngestionStatsResponse,
    UploadErrorResponse,
    UploadSuccessResponse,
)
from app.schemas.policies import (
    PolicyAggregateResponse,
    PolicyDetailResponse,
    PolicySearchResponse,
    PolicySummaryResponse,
    UserPolicyAggregateResponse,
    UserResponse,
)
from app.schemas.scheduled_posts import (
    SchedulePostRequest,
    ScheduledPostListResponse,
    ScheduledPostResponse,
)

__all__ = [
    "IngestionErrorDetail",
    "IngestionJobListResponse",
    "IngestionJobResponse",
    "IngestionStatsResponse",
    "UploadErrorResponse",
    "UploadSuccessResponse",
    "PolicyAggregateResponse",
    "PolicyDetailResponse",
    "PolicySearchResponse",
    "PolicySummaryResponse",
    "UserPolicyAggregateResponse",
    "UserResponse",
    "SchedulePostRequest",
    "ScheduledPostListResponse",
    "ScheduledPostResponse",
]
