"""
tests/test_ingestion_worker.py

The worker pool's completion signal: a Future that always carries an outcome.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator

import pytest
from sqlalchemy.orm import Session, sessionmaker

from app.domain.ingestion import BatchOutcome, FailureStage
from app.services.batch_runner import BatchRunner
from app.services.ingestion_worker import IngestionWorkerPool


@pytest.fixture()
def pool(session_factory: sessionmaker[Session]) -> Iterator[IngestionWorkerPool]:
    worker_pool = IngestionWorkerPool(runner=BatchRunner(session_factory=session_factory), max_workers=1)
    yield worker_pool
    worker_pool.shutdown(wait=True)


def test_future_resolves_to_success_outcome(pool: IngestionWorkerPool, write_csv, make_row) -> None:
    outcome = pool.submit(write_csv([make_row()])).result(timeout=30)

    assert outcome.ok
    assert outcome.stats is not None
    assert outcome.stats.policies == 1


def test_malformed_csv_resolves_to_failure_not_exception(pool: IngestionWorkerPool, tmp_path) -> None:
    path = tmp_path / "broken.csv"
    path.write_bytes(b"policy_number,firstname\nPN-1\n")

    future = pool.submit(path)

    assert future.exception(timeout=30) is None
    outcome = future.result()
    assert outcome.failure is not None
    assert outcome.failure.stage == FailureStage.STREAM
    assert path.exists()


def test_unexpected_exception_becomes_internal_failure(pool: IngestionWorkerPool) -> None:
    def explode() -> BatchOutcome:
        raise ValueError("boom")

    outcome = pool.submit_task(explode).result(timeout=30)

    assert outcome.failure is not None
    assert outcome.failure.stage == FailureStage.INTERNAL
    assert "ValueError" in outcome.failure.message


def test_run_awaits_outcome(pool: IngestionWorkerPool, write_csv, make_row) -> None:
    outcome = asyncio.run(pool.run(write_csv([make_row()])))

    assert outcome.ok
