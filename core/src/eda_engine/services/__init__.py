"""Services for profiling tabular files and compiling chart data."""

from .chart_compiler import ChartDataService, compile_chart
from .conversation_store import ConversationStore, InMemoryConversationStore
from .document_store import DocumentStore, InMemoryVectorStore, OpenAIEmbedder
from .profiler import profile_column, profile_file, profile_table
from .row_source import open_table, read_table

__all__ = [
    "ChartDataService",
    "compile_chart",
    "profile_column",
    "profile_table",
    "profile_file",
    "open_table",
    "read_table",
    "DocumentStore",
    "InMemoryVectorStore",
    "OpenAIEmbedder",
    "ConversationStore",
    "InMemoryConversationStore",
]
