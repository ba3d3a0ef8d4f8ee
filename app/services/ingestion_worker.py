"""
app/services/ingestion_worker.py

Isolated execution of ingestion batches off the request-handling path.

Each batch runs on a dedicated worker thread from a process-wide pool and
reports back through exactly one completion signal: the Future returned by
submit(), which always resolves to a BatchOutcome. Exceptions raised inside
the worker are converted into failure outcomes rather than propagated.
Rows inside one batch are processed sequentially by a single worker;
concurrent uploads run as independent workers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from functools import lru_cache
from typing import Any

from app.config import get_csv_ingestion_settings
from app.domain.ingestion import BatchOutcome, FailureStage
from app.services.batch_runner import BatchRunner, BatchSource, get_batch_runner

logger = logging.getLogger(__name__)


class IngestionWorkerPool:
    """
    Thread pool that runs batches and hands back their outcomes.
    """

    def __init__(self, *, runner: BatchRunner | None = None, max_workers: int = 2) -> None:
        self._runner = runner or get_batch_runner()
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix="csv-ingest",
        )

    def submit(self, source: BatchSource) -> Future[BatchOutcome]:
        """
        Run one batch on a worker thread.
        """

        return self.submit_task(self._runner.run, source)

    def submit_task(self, task: Callable[..., BatchOutcome], *args: Any) -> Future[BatchOutcome]:
        """
        Run an arbitrary batch-producing callable on a worker thread.
        """

        return self._executor.submit(self._run_guarded, task, *args)

    async def run(self, source: BatchSource) -> BatchOutcome:
        """
        Await a batch from async code without blocking the event loop.
        """

        return await asyncio.wrap_future(self.submit(source))

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    @staticmethod
    def _run_guarded(task: Callable[..., BatchOutcome], *args: Any) -> BatchOutcome:
        try:
            return task(*args)
        except Exception as exc:
            logger.exception("Ingestion worker failed unexpectedly")
            return BatchOutcome.failed(
                FailureStage.INTERNAL,
                f"Unexpected ingestion error ({type(exc).__name__}).",
            )


@lru_cache(maxsize=1)
def get_ingestion_worker_pool() -> IngestionWorkerPool:
    settings = get_csv_ingestion_settings()
    return IngestionWorkerPool(max_workers=settings.max_workers)
