"""
app/api/dependencies.py

Request validation shared by the upload routes.
"""

from __future__ import annotations

from fastapi import File, HTTPException, UploadFile, status

from app.config import get_csv_ingestion_settings

CSV_SUFFIX = ".csv"
CSV_CONTENT_TYPES = frozenset(
    {
        "text/csv",
        "application/csv",
        "application/vnd.ms-excel",
    }
)


def _looks_like_csv(upload: UploadFile) -> bool:
    filename = (upload.filename or "").strip().lower()
    content_type = (upload.content_type or "").split(";", 1)[0].strip().lower()
    return filename.endswith(CSV_SUFFIX) or content_type in CSV_CONTENT_TYPES


def get_csv_upload(file: UploadFile | None = File(default=None)) -> UploadFile:
    """
    Return the multipart `file` field once it is known to be a policy CSV
    within the configured size limit.

    400 for a missing or non-CSV file; 413 when the declared size is over
    CSV_INGEST_MAX_UPLOAD_BYTES. Streams without a declared size are checked
    again while they are copied to disk.
    """

    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded.",
        )

    if not _looks_like_csv(file):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    max_upload_bytes = get_csv_ingestion_settings().max_upload_bytes
    if file.size is not None and file.size > max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Upload exceeds the {max_upload_bytes} byte limit.",
        )

    return file
