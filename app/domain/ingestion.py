"""
app/domain/ingestion.py

Batch statistics and the terminal outcome reported by one ingestion run.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


class FailureStage:
    STREAM = "stream"
    PERSISTENCE = "persistence"
    INTERNAL = "internal"


@dataclass
class IngestionStats:
    """
    Per-kind counts of newly created entities during one batch.
    """

    agents: int = 0
    users: int = 0
    accounts: int = 0
    categories: int = 0
    carriers: int = 0
    policies: int = 0

    def increment(self, counter: str) -> None:
        setattr(self, counter, getattr(self, counter) + 1)

    def snapshot(self) -> "IngestionStats":
        return IngestionStats(**asdict(self))

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class BatchFailure:
    """
    Why a batch stopped: which stage failed and a human-readable cause.
    """

    stage: str
    message: str
    row_number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"stage": self.stage, "message": self.message, "row_number": self.row_number}


@dataclass(frozen=True)
class BatchOutcome:
    """
    Either final stats (success) or a failure; never both.
    """

    stats: IngestionStats | None = None
    failure: BatchFailure | None = None
    rows_read: int = 0
    rows_skipped: int = 0

    @classmethod
    def success(cls, stats: IngestionStats, *, rows_read: int, rows_skipped: int) -> "BatchOutcome":
        return cls(stats=stats.snapshot(), rows_read=rows_read, rows_skipped=rows_skipped)

    @classmethod
    def failed(
        cls,
        stage: str,
        message: str,
        *,
        row_number: int | None = None,
        rows_read: int = 0,
    ) -> "BatchOutcome":
        return cls(
            failure=BatchFailure(stage=stage, message=message, row_number=row_number),
            rows_read=rows_read,
        )

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_payload(self) -> dict[str, Any]:
        if self.failure is not None:
            return {"error": self.failure.to_dict()}
        assert self.stats is not None
        return {"stats": self.stats.to_dict()}
