"""Column type inference and statistics for uploaded tables."""

import logging
import math
import statistics
from collections.abc import Iterable, Sequence
from typing import Any

from ..schemas.profile import ColumnKind, ColumnProfile, TableProfile
from .numeric import extract_number
from .row_source import open_table

logger = logging.getLogger(__name__)

# A column is numeric when more than this share of non-empty cells parse.
NUMERIC_RATIO_THRESHOLD = 0.8
PREVIEW_ROWS = 5
EXAMPLE_VALUES = 3


def _round(value: float) -> float:
    return round(value, 2)


def profile_column(name: str, values: Sequence[Any]) -> ColumnProfile:
    """Classify one column as numeric or categorical and compute its stats.

    Never raises for malformed data: cells that do not parse as numbers are
    left out of the numeric statistics.
    """
    raw_values = [value for value in values if value is not None and value != ""]
    if not raw_values:
        return ColumnProfile(name=name, kind=ColumnKind.UNKNOWN, count=0)

    cleaned = [
        number
        for number in (extract_number(value) for value in raw_values)
        if number is not None and math.isfinite(number)
    ]

    if len(cleaned) / len(raw_values) > NUMERIC_RATIO_THRESHOLD:
        mean = statistics.fmean(cleaned)
        # Population standard deviation: mean of squared deviations.
        std_dev = math.sqrt(sum((number - mean) ** 2 for number in cleaned) / len(cleaned))
        return ColumnProfile(
            name=name,
            kind=ColumnKind.NUMERIC,
            count=len(cleaned),
            min=min(cleaned),
            max=max(cleaned),
            mean=_round(mean),
            median=_round(statistics.median(cleaned)),
            std_dev=_round(std_dev),
        )

    raw_strings = [str(value) for value in raw_values]
    return ColumnProfile(
        name=name,
        kind=ColumnKind.CATEGORICAL,
        count=len(raw_strings),
        unique_count=len(set(raw_strings)),
        example_values=raw_strings[:EXAMPLE_VALUES],
    )


def profile_table(
    rows: Iterable[dict[str, Any]],
    column_names: Sequence[str] | None = None,
) -> TableProfile:
    """Profile every column of a table in a single pass over its rows.

    Column names default to the keys of the first row. A table without data
    rows yields an empty profile rather than an error.
    """
    names: list[str] | None = list(column_names) if column_names is not None else None
    collected: dict[str, list[Any]] = {}
    preview: list[dict[str, str]] = []
    row_count = 0

    for row in rows:
        if names is None:
            names = list(row.keys())
        if not collected:
            collected = {name: [] for name in names}
        for name in names:
            collected[name].append(row.get(name))
        if row_count < PREVIEW_ROWS:
            preview.append({key: "" if value is None else str(value) for key, value in row.items()})
        row_count += 1

    if row_count == 0 or names is None:
        return TableProfile(row_count=0, column_names=[], columns={}, preview=[])

    columns = {name: profile_column(name, collected[name]) for name in names}
    return TableProfile(
        row_count=row_count,
        column_names=names,
        columns=columns,
        preview=preview,
    )


def profile_file(path: str) -> TableProfile:
    """Stream a tabular file from disk and profile it.

    Raises:
        SourceNotFoundError: If the file cannot be located or opened
        UnsupportedSourceError: If any row cannot be parsed as part of the table
    """
    stream = open_table(path)
    profile = profile_table(stream.rows, stream.column_names)
    logger.info(
        "Profiled %s: %s rows, %s columns",
        path,
        profile.row_count,
        len(profile.column_names),
    )
    return profile
