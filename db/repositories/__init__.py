"""
Repository layer exports.
"""

from db.repositories.entity_store import EntityStore
from db.repositories.errors import (
    ConstraintViolation,
    EntityStoreError,
    PersistenceError,
    WriteRejectedError,
)
from db.repositories.ingestion_job_repository import IngestionJobRepository
from db.repositories.policy_repository import PolicyRepository
from db.repositories.scheduled_post_repository import ScheduledPostRepository

__all__ = [
    "ConstraintViolation",
    "EntityStore",
    "EntityStoreError",
    "IngestionJobRepository",
    "PersistenceError",
    "PolicyRepository",
    "ScheduledPostRepository",
    "WriteRejectedError",
]
