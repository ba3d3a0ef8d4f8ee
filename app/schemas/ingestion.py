"""
app/schemas/ingestion.py

Response schemas for CSV upload and ingestion job endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class IngestionStatsResponse(BaseModel):
    """
    Counts of newly created entities, per kind.
    """

    agents: int = Field(..., ge=0)
    users: int = Field(..., ge=0)
    accounts: int = Field(..., ge=0)
    categories: int = Field(..., ge=0)
    carriers: int = Field(..., ge=0)
    policies: int = Field(..., ge=0)


class UploadSuccessResponse(BaseModel):
    message: str
    job_id: UUID
    stats: IngestionStatsResponse


class IngestionErrorDetail(BaseModel):
    stage: str
    message: str
    row_number: int | None = None


class UploadErrorResponse(BaseModel):
    job_id: UUID | None = None
    error: IngestionErrorDetail


class IngestionJobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    file_name: str
    status: str
    file_size_bytes: int | None = None
    stats: dict[str, Any] | None = None
    error_stage: str | None = None
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None


class IngestionJobListResponse(BaseModel):
    jobs: list[IngestionJobResponse] = Field(default_factory=list)
