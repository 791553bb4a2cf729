"""Schemas for chart requests and rendered chart payloads."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChartType(str, Enum):
    """Chart kinds the frontend can render."""

    BAR = "bar"
    LINE = "line"
    SCATTER = "scatter"
    PIE = "pie"
    HISTOGRAM = "histogram"
    AREA = "area"


class FilterOperator(str, Enum):
    """Numeric comparison operators allowed in chart filters."""

    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    EQ = "=="
    NE = "!="


class FilterCondition(BaseModel):
    """Row filter applied before aggregation, e.g. Price > 10000."""

    column: str = Field(..., min_length=1)
    operator: FilterOperator
    # None when the threshold is missing or not a scalar; such a filter matches no row.
    value: str | float | None = None


class ChartRequest(BaseModel):
    """Validated request to compile chart data from a table file."""

    file_path: str = Field(..., min_length=1, description="Path of the tabular file to chart")
    chart_type: ChartType
    x_column: str = Field(..., min_length=1, description="Column for the X-axis")
    series_columns: list[str] = Field(default_factory=list, description="Columns for the Y-axis series")
    filters: list[FilterCondition] = Field(default_factory=list)
    title: str = "Chart"
    description: str = ""


class ChartPayload(BaseModel):
    """Rendered dataset plus metadata, ready for the frontend."""

    model_config = ConfigDict(populate_by_name=True)

    type: ChartType
    data: list[dict[str, Any]]
    x_key: str = Field(..., alias="xKey")
    series_keys: list[str] = Field(default_factory=list, alias="seriesKeys")
    title: str = "Chart"
    description: str = ""

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
