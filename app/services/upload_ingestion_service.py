"""
app/services/upload_ingestion_service.py

Upload handling around the ingestion worker: the uploaded CSV is copied to
a temp file, tracked as an IngestionJob, processed on the worker pool and
deleted once the outcome is known, whatever it is.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from app.config import get_csv_ingestion_settings
from app.domain.ingestion import BatchOutcome
from app.services.batch_runner import BatchRunner, get_batch_runner
from app.services.ingestion_worker import IngestionWorkerPool, get_ingestion_worker_pool
from db.models.ingestion_job import IngestionJob
from db.repositories.ingestion_job_repository import IngestionJobRepository

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


class UploadTooLargeError(ValueError):
    """
    Raised when an upload exceeds the configured size limit.
    """


@dataclass(frozen=True)
class UploadIngestionResult:
    job_id: uuid.UUID
    outcome: BatchOutcome


class UploadIngestionService:
    """
    Coordinates temp-file handling, job tracking and worker dispatch.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session] | None = None,
        worker_pool: IngestionWorkerPool | None = None,
        runner: BatchRunner | None = None,
        max_upload_bytes: int | None = None,
    ) -> None:
        if session_factory is None:
            from db.session import get_session_factory

            self._session_factory = get_session_factory()
        else:
            self._session_factory = session_factory

        self._worker_pool = worker_pool or get_ingestion_worker_pool()
        self._runner = runner or get_batch_runner()
        self._max_upload_bytes = max_upload_bytes or get_csv_ingestion_settings().max_upload_bytes

    async def ingest_upload(self, upload_file: UploadFile) -> UploadIngestionResult:
        """
        Process one uploaded CSV and wait for its outcome off the event loop.
        """

        temp_file_path, file_size = await run_in_threadpool(self._persist_temp_upload, upload_file)
        try:
            file_name = upload_file.filename or "upload.csv"
            job = await run_in_threadpool(self._create_job, file_name, file_size)
            logger.info("CSV upload accepted job_id=%s file=%r bytes=%d", job.id, file_name, file_size)

            future = self._worker_pool.submit_task(self._run_job, job.id, temp_file_path)
            outcome = await asyncio.wrap_future(future)
        finally:
            self._delete_file_quietly(temp_file_path)

        return UploadIngestionResult(job_id=job.id, outcome=outcome)

    def get_job(self, *, db: Session, job_id: uuid.UUID) -> IngestionJob | None:
        return IngestionJobRepository(db).get_job(job_id)

    def list_jobs(self, *, db: Session, limit: int = 100, status: str | None = None) -> list[IngestionJob]:
        return IngestionJobRepository(db).list_jobs(limit=limit, status=status)

    def _create_job(self, file_name: str, file_size: int) -> IngestionJob:
        with self._session_factory() as db:
            job = IngestionJobRepository(db).create_job(file_name=file_name, file_size_bytes=file_size)
            db.commit()
            return job

    def _run_job(self, job_id: uuid.UUID, temp_file_path: str) -> BatchOutcome:
        self._record_job_state(job_id, lambda repository: repository.mark_running(job_id=job_id))

        outcome = self._runner.run(temp_file_path)

        if outcome.ok and outcome.stats is not None:
            stats = outcome.stats.to_dict()
            self._record_job_state(
                job_id,
                lambda repository: repository.mark_completed(job_id=job_id, stats=stats),
            )
        elif outcome.failure is not None:
            failure = outcome.failure
            self._record_job_state(
                job_id,
                lambda repository: repository.mark_failed(
                    job_id=job_id,
                    stage=failure.stage,
                    error_message=failure.message,
                ),
            )
        return outcome

    def _record_job_state(
        self,
        job_id: uuid.UUID,
        apply: Callable[[IngestionJobRepository], IngestionJob | None],
    ) -> None:
        with self._session_factory() as db:
            try:
                if apply(IngestionJobRepository(db)) is None:
                    logger.error("Ingestion job not found id=%s", job_id)
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                logger.exception("Failed to persist ingestion job state id=%s", job_id)

    def _persist_temp_upload(self, upload_file: UploadFile) -> tuple[str, int]:
        file_name = upload_file.filename or "upload.csv"
        _, ext = os.path.splitext(file_name)
        suffix = ext if ext else ".csv"
        upload_file.file.seek(0)

        with tempfile.NamedTemporaryFile(delete=False, prefix="policy_upload_", suffix=suffix) as temp_file:
            temp_path = temp_file.name
            try:
                while True:
                    chunk = upload_file.file.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    temp_file.write(chunk)
                    if temp_file.tell() > self._max_upload_bytes:
                        raise UploadTooLargeError(
                            f"Upload exceeds the {self._max_upload_bytes} byte limit."
                        )
            except BaseException:
                temp_file.close()
                self._delete_file_quietly(temp_path)
                raise
            file_size = temp_file.tell()

        return temp_path, file_size

    def _delete_file_quietly(self, file_path: str) -> None:
        try:
            os.remove(file_path)
        except OSError:
            return


@lru_cache(maxsize=1)
def get_upload_ingestion_service() -> UploadIngestionService:
    return UploadIngestionService()
