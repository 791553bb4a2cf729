"""Schemas for table and column profiles."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ColumnKind(str, Enum):
    """Inferred kind of a column."""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    UNKNOWN = "unknown"


class ColumnProfile(BaseModel):
    """Type and statistics inferred for one column."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: ColumnKind
    count: int = 0
    min: float | None = None
    max: float | None = None
    mean: float | None = None
    median: float | None = None
    std_dev: float | None = None
    unique_count: int | None = None
    example_values: list[str] | None = None


class TableProfile(BaseModel):
    """Profile of a whole table, derived once per analysis request."""

    model_config = ConfigDict(frozen=True)

    row_count: int = 0
    column_names: list[str] = Field(default_factory=list)
    columns: dict[str, ColumnProfile] = Field(default_factory=dict)
    preview: list[dict[str, str]] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0

    def prompt_summary(self) -> dict[str, Any]:
        """Lightweight view forwarded to the language model.

        Only the type is kept per column, plus min/max for numeric columns,
        to bound prompt size.
        """
        columns: dict[str, dict[str, Any]] = {}
        for name in self.column_names:
            profile = self.columns.get(name)
            if profile is None:
                continue
            entry: dict[str, Any] = {"type": profile.kind.value}
            if profile.kind == ColumnKind.NUMERIC:
                entry["min"] = profile.min
                entry["max"] = profile.max
            columns[name] = entry
        return {"rowCount": self.row_count, "columns": columns}

    def sample(self, size: int = 2) -> list[dict[str, str]]:
        return self.preview[:size]
