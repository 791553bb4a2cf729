"""Row source for uploaded tabular files.

Every cell is read as its raw string form ("" for blanks) so that type
inference happens in the profiler, not in the reader. The first row of the
source defines the column names.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from ..core.exceptions import SourceNotFoundError, UnsupportedSourceError

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xls"}
CSV_CHUNK_SIZE = 5000

Row = dict[str, str]


@dataclass
class TableStream:
    """Column names plus a lazy, single-use iterator over rows."""

    column_names: list[str]
    rows: Iterator[Row]

    def close(self) -> None:
        close = getattr(self.rows, "close", None)
        if close is not None:
            close()


@dataclass
class TableData:
    column_names: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)


def _resolve(path: str) -> Path:
    source = Path(path)
    if not source.is_file():
        raise SourceNotFoundError(path)
    return source


def _frame_rows(frame: pd.DataFrame, column_names: list[str]) -> Iterator[Row]:
    for values in frame.itertuples(index=False, name=None):
        yield {name: "" if value is None else str(value) for name, value in zip(column_names, values)}


def _iter_csv_rows(source: Path, column_names: list[str]) -> Iterator[Row]:
    try:
        reader = pd.read_csv(
            source,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            chunksize=CSV_CHUNK_SIZE,
            encoding_errors="replace",
        )
        with reader:
            for chunk in reader:
                yield from _frame_rows(chunk, column_names)
    except pd.errors.ParserError as exc:
        # Malformed lines surface only when their chunk is read.
        raise UnsupportedSourceError(f"Could not parse {source} as a table: {exc}") from exc


def open_table(path: str) -> TableStream:
    """Open a CSV or Excel file and stream its rows.

    Rows that fail to parse raise UnsupportedSourceError while iterating.

    Raises:
        SourceNotFoundError: If the file does not exist or cannot be opened
        UnsupportedSourceError: If the file cannot be parsed as a table
    """
    source = _resolve(path)
    try:
        if source.suffix.lower() in EXCEL_SUFFIXES:
            frame = pd.read_excel(source, sheet_name=0, dtype=str).fillna("")
            column_names = [str(name) for name in frame.columns]
            return TableStream(column_names, _frame_rows(frame, column_names))

        header = pd.read_csv(source, nrows=0, encoding_errors="replace")
        column_names = [str(name) for name in header.columns]
        return TableStream(column_names, _iter_csv_rows(source, column_names))
    except pd.errors.EmptyDataError:
        logger.info("Source %s is empty", path)
        return TableStream([], iter(()))
    except pd.errors.ParserError as exc:
        raise UnsupportedSourceError(f"Could not parse {path} as a table: {exc}") from exc
    except OSError as exc:
        logger.error("Failed to open source %s: %s", path, exc)
        raise SourceNotFoundError(path) from exc


def read_table(path: str) -> TableData:
    """Read every row of a table into memory."""
    stream = open_table(path)
    return TableData(column_names=stream.column_names, rows=list(stream.rows))
