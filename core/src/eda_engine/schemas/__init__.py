from .chart import ChartPayload, ChartRequest, ChartType, FilterCondition, FilterOperator
from .chat import (
    AgentRunOutput,
    AgentTurnResult,
    ChatRequest,
    ChatResponse,
    HistoryTurn,
    Source,
    Strategy,
    ToolStep,
)
from .document import AddDocumentsResponse, Document
from .profile import ColumnKind, ColumnProfile, TableProfile

__all__ = [
    "AddDocumentsResponse",
    "AgentRunOutput",
    "AgentTurnResult",
    "ChartPayload",
    "ChartRequest",
    "ChartType",
    "ChatRequest",
    "ChatResponse",
    "ColumnKind",
    "ColumnProfile",
    "Document",
    "FilterCondition",
    "FilterOperator",
    "HistoryTurn",
    "Source",
    "Strategy",
    "TableProfile",
    "ToolStep",
]
