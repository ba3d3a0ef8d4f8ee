"""
app/domain package marker.
"""

from app.domain.ingestion import BatchFailure, BatchOutcome, FailureStage, IngestionStats
from app.domain.policy_row import NormalizedRow

__all__ = [
    "BatchFailure",
    "BatchOutcome",
    "FailureStage",
    "IngestionStats",
    "NormalizedRow",
]
