"""
Repository for ingestion job lifecycle persistence and status lookup.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from db.models.ingestion_job import IngestionJob, IngestionJobStatus


class IngestionJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_job(self, *, file_name: str, file_size_bytes: int | None = None) -> IngestionJob:
        job = IngestionJob(
            file_name=file_name,
            file_size_bytes=file_size_bytes,
            status=IngestionJobStatus.PENDING,
        )
        self._session.add(job)
        self._session.flush()
        self._session.refresh(job)
        return job

    def get_job(self, job_id: uuid.UUID) -> IngestionJob | None:
        return self._session.get(IngestionJob, job_id)

    def list_jobs(self, *, limit: int = 100, status: str | None = None) -> list[IngestionJob]:
        stmt: Select[tuple[IngestionJob]] = select(IngestionJob)
        if status:
            stmt = stmt.where(IngestionJob.status == status)

        stmt = stmt.order_by(IngestionJob.created_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def mark_running(self, *, job_id: uuid.UUID) -> IngestionJob | None:
        job = self.get_job(job_id)
        if job is None:
            return None
        job.status = IngestionJobStatus.RUNNING
        job.started_at = datetime.now(timezone.utc)
        job.completed_at = None
        job.error_stage = None
        job.error_message = None
        return job

    def mark_completed(self, *, job_id: uuid.UUID, stats: dict[str, Any]) -> IngestionJob | None:
        job = self.get_job(job_id)
        if job is None:
            return None
        job.status = IngestionJobStatus.COMPLETED
        job.completed_at = datetime.now(timezone.utc)
        job.stats = stats
        job.error_stage = None
        job.error_message = None
        return job

    def mark_failed(
        self,
        *,
        job_id: uuid.UUID,
        stage: str,
        error_message: str,
    ) -> IngestionJob | None:
        job = self.get_job(job_id)
        if job is None:
            return None
        job.status = IngestionJobStatus.FAILED
        job.completed_at = datetime.now(timezone.utc)
        job.error_stage = stage
        job.error_message = error_message[:2000]
        return job
