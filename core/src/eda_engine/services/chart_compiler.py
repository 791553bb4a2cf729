"""Chart data compilation: filtering, aggregation, binning and shaping."""

import asyncio
import logging
import math
import operator
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import closing
from itertools import chain, islice
from typing import Any

from ..schemas.chart import ChartRequest, ChartType, FilterCondition, FilterOperator
from .numeric import extract_number, parse_threshold
from .row_source import open_table

logger = logging.getLogger(__name__)

MAX_CHART_ROWS = 2000
MIN_BINS = 5
MAX_BINS = 20
COUNT_KEY = "Count"
FREQUENCY_KEY = "Frequency"
UNKNOWN_KEY = "Unknown"

COUNT_CHART_TYPES = {ChartType.BAR, ChartType.PIE}

_COMPARATORS: dict[FilterOperator, Callable[[float, float], bool]] = {
    FilterOperator.GT: operator.gt,
    FilterOperator.LT: operator.lt,
    FilterOperator.GE: operator.ge,
    FilterOperator.LE: operator.le,
    FilterOperator.EQ: operator.eq,
    FilterOperator.NE: operator.ne,
}


def _matches(row: dict[str, Any], condition: FilterCondition) -> bool:
    value = extract_number(row.get(condition.column))
    threshold = parse_threshold(condition.value)
    if value is None or threshold is None:
        return False
    return _COMPARATORS[condition.operator](value, threshold)


def iter_filtered(rows: Iterable[dict[str, Any]], filters: Sequence[FilterCondition]) -> Iterator[dict[str, Any]]:
    """Lazily yield rows satisfying every filter; unparseable cells never match."""
    for row in rows:
        if all(_matches(row, condition) for condition in filters):
            yield row


def wants_count(request: ChartRequest, column_names: Sequence[str]) -> bool:
    """True when the request asks for occurrence counts per X value."""
    known = set(column_names)
    requested_count = any(
        column.lower() == COUNT_KEY.lower() and column not in known
        for column in request.series_columns
    )
    if requested_count:
        return True
    return not request.series_columns and request.chart_type in COUNT_CHART_TYPES


def count_by(rows: Iterable[dict[str, Any]], x_column: str) -> list[dict[str, Any]]:
    counts: dict[str, int] = {}
    for row in rows:
        key = row.get(x_column) or UNKNOWN_KEY
        counts[key] = counts.get(key, 0) + 1
    return [{x_column: key, COUNT_KEY: count} for key, count in counts.items()]


def _format_edge(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def bin_count_for(n: int) -> int:
    """Dynamic bin count: round(sqrt(n)) clamped to [5, 20]."""
    return min(MAX_BINS, max(MIN_BINS, round(math.sqrt(n))))


def histogram_bins(rows: Iterable[dict[str, Any]], x_column: str) -> list[dict[str, Any]]:
    # Only the X values are kept; the range must be known before binning.
    values = [
        number
        for number in (extract_number(row.get(x_column)) for row in rows)
        if number is not None and math.isfinite(number)
    ]
    if not values:
        return []

    low = min(values)
    high = max(values)
    bins = bin_count_for(len(values))
    # All values identical: fall back to unit-width bins.
    width = (high - low) / bins or 1.0

    frequencies = [0] * bins
    for value in values:
        index = math.floor((value - low) / width)
        frequencies[min(max(index, 0), bins - 1)] += 1

    results = []
    for index, frequency in enumerate(frequencies):
        start = low + index * width
        end = low + (index + 1) * width
        results.append({x_column: f"{_format_edge(start)}-{_format_edge(end)}", FREQUENCY_KEY: frequency})
    return results


def extract_series(
    rows: Iterable[dict[str, Any]],
    x_column: str,
    series_columns: Sequence[str],
) -> list[dict[str, Any]]:
    """One output row per input row; X stays raw, series become numbers."""
    results = []
    for row in rows:
        output: dict[str, Any] = {x_column: row.get(x_column)}
        for column in series_columns:
            number = extract_number(row.get(column))
            output[column] = number if number is not None else 0
        results.append(output)
    return results


def compile_chart(
    rows: Iterable[dict[str, Any]],
    request: ChartRequest,
    column_names: Sequence[str] | None = None,
) -> list[dict[str, Any]]:
    """Turn table rows into the dataset for one chart.

    Pure function of its inputs. ``rows`` may be a one-shot iterator: it is
    consumed once, and raw extraction stops reading after MAX_CHART_ROWS
    matching rows. Modes are tried in priority order: count aggregation,
    histogram binning, raw extraction. The result never exceeds
    MAX_CHART_ROWS rows.
    """
    filtered = iter_filtered(rows, request.filters)
    if column_names is None:
        first = next(filtered, None)
        if first is None:
            return []
        column_names = list(first.keys())
        filtered = chain([first], filtered)

    if wants_count(request, column_names):
        results = count_by(filtered, request.x_column)
    elif request.chart_type == ChartType.HISTOGRAM:
        results = histogram_bins(filtered, request.x_column)
    else:
        results = extract_series(islice(filtered, MAX_CHART_ROWS), request.x_column, request.series_columns)

    return results[:MAX_CHART_ROWS]


def compile_chart_file(request: ChartRequest) -> list[dict[str, Any]]:
    """Stream the request's source file through compile_chart.

    Raises:
        SourceNotFoundError: If the backing file cannot be located or opened
        UnsupportedSourceError: If the file cannot be parsed as a table
    """
    with closing(open_table(request.file_path)) as stream:
        return compile_chart(stream.rows, request, stream.column_names)


class ChartDataService:
    """Streams a table from its source and compiles chart data for it."""

    async def get_chart_data(self, request: ChartRequest) -> list[dict[str, Any]]:
        data = await asyncio.to_thread(compile_chart_file, request)
        logger.info(
            "Compiled %s chart on %s from %s: %s rows",
            request.chart_type.value,
            request.x_column,
            request.file_path,
            len(data),
        )
        return data
