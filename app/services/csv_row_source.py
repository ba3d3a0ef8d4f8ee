"""
app/services/csv_row_source.py

Streaming row source for header-delimited CSV files.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterator
from typing import BinaryIO


class StreamError(RuntimeError):
    """
    Raised when the file cannot be read as a well-formed CSV stream.
    """

    def __init__(self, message: str, *, row_number: int | None = None) -> None:
        super().__init__(message)
        self.row_number = row_number


def iter_csv_rows(
    raw_file: BinaryIO,
    *,
    encoding: str = "utf-8-sig",
) -> Iterator[tuple[int, dict[str, str]]]:
    """
    Yield (row_number, row) pairs lazily, keyed by the header row.

    Row numbers are physical line numbers with the header on line 1.
    Header names are stripped.
    Blank lines are skipped; a row with more or fewer cells than the header
    raises StreamError instead of being dropped. The binary handle is left
    open for the caller.
    """

    text_stream = io.TextIOWrapper(raw_file, encoding=encoding, newline="")
    try:
        reader = csv.reader(text_stream)
        try:
            header_cells = next(reader, None)
            if not header_cells or all(not cell.strip() for cell in header_cells):
                raise StreamError("CSV header row is missing.", row_number=1)
            headers = [cell.strip() for cell in header_cells]

            for cells in reader:
                if not cells:
                    continue
                row_number = reader.line_num
                if len(cells) != len(headers):
                    raise StreamError(
                        f"Row has {len(cells)} fields but the header has {len(headers)}.",
                        row_number=row_number,
                    )
                yield row_number, dict(zip(headers, cells))
        except UnicodeDecodeError as exc:
            raise StreamError(f"CSV must be {encoding} encoded.") from exc
        except csv.Error as exc:
            raise StreamError(f"Invalid CSV format: {exc}") from exc
    finally:
        try:
            text_stream.detach()
        except ValueError:
            pass
