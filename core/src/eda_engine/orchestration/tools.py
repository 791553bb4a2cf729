"""Chart tool exposed to the EDA agent.

The agent calls ``generate_chart`` with loosely-typed arguments. They are
normalized into a strict ChartRequest at this boundary; every problem is
returned to the agent as tool output text so it can correct itself within
the same turn, never raised into the agent loop.
"""

import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError
from strands import tool

from ..core.exceptions import ChartRequestError
from ..schemas.chart import ChartPayload, ChartRequest, ChartType, FilterCondition
from ..services.chart_compiler import COUNT_KEY, FREQUENCY_KEY, ChartDataService

logger = logging.getLogger(__name__)

CHART_TOOL_NAME = "generate_chart"
CHART_TOOL_DESCRIPTION = (
    "Generates a chart/graph from the uploaded tabular data. "
    "Use this tool when the user asks to visualize data."
)
NO_DATA_ERROR = "No data generated. Check column names or filters."
REQUIRED_FIELDS = ("file_path", "chart_type", "x_column")

# Declared parameter schema, as listed to API clients.
GENERATE_CHART_PARAMETERS: dict[str, dict[str, Any]] = {
    "file_path": {
        "type": "string",
        "description": "The absolute path to the data file to analyze",
        "required": True,
    },
    "chart_type": {
        "type": "string",
        "enum": [chart_type.value for chart_type in ChartType],
        "description": "The type of chart to generate",
        "required": True,
    },
    "x_column": {
        "type": "string",
        "description": "The column name for the X-axis",
        "required": True,
    },
    "series_columns": {
        "type": "array",
        "items": {"type": "string"},
        "description": "Column names for the Y-axis/series",
        "required": False,
    },
    "filters": {
        "type": "array",
        "items": {"column": "string", "operator": "> < >= <= == !=", "value": "string"},
        "description": "Numeric row filters applied before charting",
        "required": False,
    },
    "title": {"type": "string", "description": "A descriptive title for the chart", "required": False},
    "description": {
        "type": "string",
        "description": "A brief explanation of what the chart shows",
        "required": False,
    },
}

# camelCase spellings some models emit.
_KEY_ALIASES = {
    "filePath": "file_path",
    "chartType": "chart_type",
    "xColumn": "x_column",
    "seriesColumns": "series_columns",
}

_FILTER_KEY_ALIASES = {"col": "column", "op": "operator", "val": "value"}


def _normalize_keys(arguments: dict[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in arguments.items():
        normalized[_KEY_ALIASES.get(key, key)] = value
    return normalized


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _maybe_json(value: str) -> Any:
    stripped = value.strip()
    if stripped[:1] in ("[", "{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    return value


def coerce_series_columns(value: Any) -> list[str]:
    """Best-effort list of series column names.

    A bare string becomes a one-element list; a missing value becomes [].
    """
    if value is None:
        return []
    if isinstance(value, str):
        if not value.strip():
            return []
        decoded = _maybe_json(value)
        if isinstance(decoded, list):
            return coerce_series_columns(decoded)
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None and str(item).strip()]
    return [str(value)]


def coerce_filters(value: Any) -> list[FilterCondition]:
    """Best-effort list of filters; malformed entries are dropped."""
    if value is None:
        return []
    if isinstance(value, str):
        value = _maybe_json(value)
        if isinstance(value, str):
            return []
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []

    conditions: list[FilterCondition] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        candidate = {_FILTER_KEY_ALIASES.get(key, key): val for key, val in item.items()}
        threshold = candidate.get("value")
        if isinstance(threshold, bool) or not isinstance(threshold, (str, int, float)):
            # Unusable threshold: keep the filter so it rejects every row.
            candidate["value"] = None
        try:
            conditions.append(FilterCondition.model_validate(candidate))
        except ValidationError as exc:
            logger.warning("Dropping malformed filter %s: %s", item, exc.errors()[0].get("msg"))
    return conditions


def coerce_chart_arguments(arguments: dict[str, Any] | None) -> ChartRequest:
    """Normalize raw agent arguments into a ChartRequest.

    Raises:
        ChartRequestError: With an agent-readable message when required fields
            are missing or the chart type is not supported
    """
    raw = _normalize_keys(arguments or {})
    missing = [field for field in REQUIRED_FIELDS if not _text(raw.get(field))]
    if missing:
        received = json.dumps(arguments or {}, default=str)
        raise ChartRequestError(
            f"Error: Missing required fields (file_path, chart_type, or x_column). Received Input: {received}"
        )

    chart_type = _text(raw["chart_type"]).lower()
    try:
        chart_kind = ChartType(chart_type)
    except ValueError:
        allowed = ", ".join(kind.value for kind in ChartType)
        raise ChartRequestError(f"Error: Unsupported chart_type '{chart_type}'. Use one of: {allowed}.")

    return ChartRequest(
        file_path=_text(raw["file_path"]),
        chart_type=chart_kind,
        x_column=_text(raw["x_column"]),
        series_columns=coerce_series_columns(raw.get("series_columns")),
        filters=coerce_filters(raw.get("filters")),
        title=_text(raw.get("title")) or "Chart",
        description=_text(raw.get("description")),
    )


def infer_series_keys(series_columns: Sequence[str], data: Sequence[dict[str, Any]]) -> list[str]:
    """Adopt Count/Frequency as the series key when the agent gave none."""
    if series_columns or not data:
        return list(series_columns)
    sample = data[0]
    if COUNT_KEY in sample:
        return [COUNT_KEY]
    if FREQUENCY_KEY in sample:
        return [FREQUENCY_KEY]
    return []


class ChartToolkit:
    """Wraps the chart compiler behind an agent-callable tool."""

    def __init__(self, chart_service: ChartDataService | None = None):
        self.chart_service = chart_service or ChartDataService()

    async def run_generate_chart(self, arguments: dict[str, Any] | None) -> str:
        """Execute a chart request and serialize the outcome for the agent."""
        logger.info("[Tool: %s] Raw Input: %s", CHART_TOOL_NAME, json.dumps(arguments or {}, default=str))
        try:
            try:
                request = coerce_chart_arguments(arguments)
            except ChartRequestError as exc:
                logger.warning("[Tool: %s] Rejected input: %s", CHART_TOOL_NAME, exc)
                return str(exc)

            data = await self.chart_service.get_chart_data(request)
            if not data:
                return json.dumps({"error": NO_DATA_ERROR})

            payload = ChartPayload(
                type=request.chart_type,
                data=data,
                x_key=request.x_column,
                series_keys=infer_series_keys(request.series_columns, data),
                title=request.title,
                description=request.description,
            )
            return json.dumps(payload.to_wire())
        except Exception as exc:
            logger.exception("[Tool Error] %s failed", CHART_TOOL_NAME)
            return f"System Error generating chart: {exc}"

    @tool
    async def generate_chart(
        self,
        file_path: str | None = None,
        chart_type: str | None = None,
        x_column: str | None = None,
        series_columns: Any = None,
        filters: Any = None,
        title: str | None = None,
        description: str | None = None,
    ) -> str:
        """Generates a chart/graph from the uploaded tabular data.

        Use this tool when the user asks to visualize data. Leave
        series_columns empty for histograms and for bar/pie charts of counts.

        Args:
            file_path: The absolute path to the data file to analyze
            chart_type: The type of chart to generate (bar, line, scatter, pie, histogram, area)
            x_column: The column name for the X-axis
            series_columns: Array of column names for the Y-axis/series
            filters: Optional numeric row filters, e.g. [{"column": "Price", "operator": ">", "value": "10000"}]
            title: A descriptive title for the chart
            description: A brief explanation of what the chart shows

        Returns:
            JSON chart payload, or an error message describing what to fix
        """
        return await self.run_generate_chart(
            {
                "file_path": file_path,
                "chart_type": chart_type,
                "x_column": x_column,
                "series_columns": series_columns,
                "filters": filters,
                "title": title,
                "description": description,
            }
        )

    def describe(self) -> dict[str, Any]:
        return {
            "name": CHART_TOOL_NAME,
            "description": CHART_TOOL_DESCRIPTION,
            "parameters": GENERATE_CHART_PARAMETERS,
        }
