"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.account import Account
from db.models.agent import Agent
from db.models.carrier import Carrier
from db.models.category import Category
from db.models.ingestion_job import IngestionJob, IngestionJobStatus
from db.models.policy import Policy
from db.models.scheduled_post import ScheduledPost, ScheduledPostStatus
from db.models.user import User

__all__ = [
    "Account",
    "Agent",
    "Carrier",
    "Category",
    "IngestionJob",
    "IngestionJobStatus",
    "Policy",
    "ScheduledPost",
    "ScheduledPostStatus",
    "User",
]
