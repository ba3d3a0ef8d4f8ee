"""
app/services package marker.
"""

from app.services.batch_runner import BatchRunner, get_batch_runner, run_batch
from app.services.csv_row_source import StreamError, iter_csv_rows
from app.services.entity_resolver import EntityResolver, RowResolution
from app.services.ingestion_worker import IngestionWorkerPool, get_ingestion_worker_pool
from app.services.policy_query_service import PolicyQueryService, get_policy_query_service
from app.services.scheduled_post_service import (
    ScheduledPostService,
    ScheduledPostValidationError,
    get_scheduled_post_service,
)
from app.services.upload_ingestion_service import (
    UploadIngestionService,
    UploadTooLargeError,
    get_upload_ingestion_service,
)

__all__ = [
    "BatchRunner",
    "get_batch_runner",
    "run_batch",
    "StreamError",
    "iter_csv_rows",
    "EntityResolver",
    "RowResolution",
    "IngestionWorkerPool",
    "get_ingestion_worker_pool",
    "PolicyQueryService",
    "get_policy_query_service",
    "ScheduledPostService",
    "ScheduledPostValidationError",
    "get_scheduled_post_service",
    "UploadIngestionService",
    "UploadTooLargeError",
    "get_upload_ingestion_service",
]
