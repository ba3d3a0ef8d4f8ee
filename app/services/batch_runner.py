"""
app/services/batch_runner.py

Runs one policy CSV file through normalization and entity resolution.

Every parsed row is buffered before the first write, so a malformed file is
rejected without touching the store. Rows are then resolved strictly in
order; each row commits before the next begins. On a persistence failure
the in-flight row is rolled back, earlier rows stay committed, and the
batch stops with a failure outcome instead of partial stats.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import BinaryIO, Union

from sqlalchemy.orm import Session, sessionmaker

from app.config import get_csv_ingestion_settings
from app.domain.ingestion import BatchOutcome, FailureStage, IngestionStats
from app.normalizers.row_normalizer import RowNormalizer
from app.services.csv_row_source import StreamError, iter_csv_rows
from app.services.entity_resolver import EntityResolver
from db.repositories.entity_store import EntityStore
from db.repositories.errors import PersistenceError

logger = logging.getLogger(__name__)

BatchSource = Union[str, os.PathLike, BinaryIO]


class BatchRunner:
    """
    Owns the store session factory and drives one batch at a time per call.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session] | None = None,
        normalizer: RowNormalizer | None = None,
        encoding: str = "utf-8-sig",
    ) -> None:
        if session_factory is None:
            from db.session import get_session_factory

            self._session_factory = get_session_factory()
        else:
            self._session_factory = session_factory
        self._normalizer = normalizer or RowNormalizer()
        self._encoding = encoding

    def run(self, source: BatchSource) -> BatchOutcome:
        """
        Ingest one file (path or binary handle) and return its outcome.
        """

        try:
            rows = self._read_rows(source)
        except StreamError as exc:
            logger.error("CSV stream rejected row=%s: %s", exc.row_number, exc)
            return BatchOutcome.failed(FailureStage.STREAM, str(exc), row_number=exc.row_number)
        except OSError as exc:
            logger.error("CSV file could not be opened: %s", exc)
            return BatchOutcome.failed(FailureStage.STREAM, f"Unable to read file: {exc.strerror or exc}")

        logger.info("CSV batch parsed rows=%d", len(rows))
        stats = IngestionStats()
        already_ingested = 0

        with self._session_factory() as session:
            store = EntityStore(session)
            resolver = EntityResolver(store)

            for row_number, raw_row in rows:
                try:
                    normalized = self._normalizer.normalize(raw_row)
                    resolution = resolver.resolve_row(normalized, stats)
                    store.commit()
                except PersistenceError as exc:
                    store.rollback()
                    logger.exception("CSV batch aborted at row=%d", row_number)
                    return BatchOutcome.failed(
                        FailureStage.PERSISTENCE,
                        str(exc),
                        row_number=row_number,
                        rows_read=len(rows),
                    )
                except Exception as exc:  # noqa: BLE001
                    store.rollback()
                    logger.exception("CSV batch aborted by unexpected error at row=%d", row_number)
                    return BatchOutcome.failed(
                        FailureStage.INTERNAL,
                        f"Unexpected error while ingesting row ({type(exc).__name__}).",
                        row_number=row_number,
                        rows_read=len(rows),
                    )

                if resolution.already_ingested:
                    already_ingested += 1
                    logger.debug(
                        "Policy already ingested row=%d policy_number=%r",
                        row_number,
                        normalized.policy_number,
                    )

        logger.info(
            "CSV batch completed rows=%d already_ingested=%d stats=%s",
            len(rows),
            already_ingested,
            stats.to_dict(),
        )
        return BatchOutcome.success(stats, rows_read=len(rows), rows_skipped=already_ingested)

    def _read_rows(self, source: BatchSource) -> list[tuple[int, dict[str, str]]]:
        if isinstance(source, (str, os.PathLike)):
            with open(source, "rb") as handle:
                return list(iter_csv_rows(handle, encoding=self._encoding))
        return list(iter_csv_rows(source, encoding=self._encoding))


@lru_cache(maxsize=1)
def get_batch_runner() -> BatchRunner:
    """
    Build and cache the process-wide batch runner.
    """

    settings = get_csv_ingestion_settings()
    return BatchRunner(encoding=settings.encoding)


def run_batch(source: BatchSource, *, runner: BatchRunner | None = None) -> BatchOutcome:
    """
    Ingestion entry point: stats on success, a failure description otherwise.
    """

    return (runner or get_batch_runner()).run(source)
