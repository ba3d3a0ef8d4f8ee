"""
app/api/routers/upload.py

CSV upload and ingestion job HTTP endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.dependencies import get_csv_upload
from app.domain.ingestion import FailureStage
from app.schemas.ingestion import (
    IngestionJobListResponse,
    IngestionJobResponse,
    IngestionStatsResponse,
    UploadErrorResponse,
    UploadSuccessResponse,
)
from app.services.upload_ingestion_service import (
    UploadIngestionService,
    UploadTooLargeError,
    get_upload_ingestion_service,
)
from db.session import get_db

router = APIRouter(prefix="/api", tags=["ingestion"])

_FAILURE_STATUS_CODES = {
    FailureStage.STREAM: status.HTTP_422_UNPROCESSABLE_ENTITY,
    FailureStage.PERSISTENCE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    FailureStage.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@router.post(
    "/upload",
    response_model=UploadSuccessResponse,
    responses={
        422: {"model": UploadErrorResponse},
        500: {"model": UploadErrorResponse},
    },
)
async def upload_policies(
    file: UploadFile = Depends(get_csv_upload),
    upload_service: UploadIngestionService = Depends(get_upload_ingestion_service),
) -> UploadSuccessResponse | JSONResponse:
    """
    Ingest one policy CSV and report per-kind creation counts.
    """

    try:
        result = await upload_service.ingest_upload(file)
    except UploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(exc),
        ) from exc
    finally:
        await file.close()

    outcome = result.outcome
    if outcome.failure is not None:
        body = UploadErrorResponse.model_validate(
            {"job_id": result.job_id, **outcome.to_payload()}
        )
        return JSONResponse(
            status_code=_FAILURE_STATUS_CODES.get(
                outcome.failure.stage, status.HTTP_500_INTERNAL_SERVER_ERROR
            ),
            content=jsonable_encoder(body),
        )

    assert outcome.stats is not None
    return UploadSuccessResponse(
        message="File processed successfully",
        job_id=result.job_id,
        stats=IngestionStatsResponse(**outcome.stats.to_dict()),
    )


@router.get("/ingestion-jobs", response_model=IngestionJobListResponse)
def list_ingestion_jobs(
    status_filter: str | None = Query(default=None, alias="status", description="Optional status filter"),
    limit: int = Query(default=100, ge=1, le=500, description="Max jobs returned"),
    db: Session = Depends(get_db),
    upload_service: UploadIngestionService = Depends(get_upload_ingestion_service),
) -> IngestionJobListResponse:
    jobs = upload_service.list_jobs(db=db, limit=limit, status=status_filter)
    return IngestionJobListResponse(
        jobs=[IngestionJobResponse.model_validate(job) for job in jobs]
    )


@router.get("/ingestion-jobs/{job_id}", response_model=IngestionJobResponse)
def get_ingestion_job(
    job_id: UUID,
    db: Session = Depends(get_db),
    upload_service: UploadIngestionService = Depends(get_upload_ingestion_service),
) -> IngestionJobResponse:
    job = upload_service.get_job(db=db, job_id=job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Ingestion job not found: {job_id}",
        )
    return IngestionJobResponse.model_validate(job)
