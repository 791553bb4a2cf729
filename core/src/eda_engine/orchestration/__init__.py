"""Agent orchestration: the chart tool, the agent runner and turn handling."""

from .hooks import ToolCallRecorder, ToolCallRecorderHook
from .runner import AgentRunner, StrandsAgentRunner
from .tools import CHART_TOOL_NAME, ChartToolkit, coerce_chart_arguments
from .turn import TurnOrchestrator

__all__ = [
    "CHART_TOOL_NAME",
    "ChartToolkit",
    "coerce_chart_arguments",
    "ToolCallRecorder",
    "ToolCallRecorderHook",
    "AgentRunner",
    "StrandsAgentRunner",
    "TurnOrchestrator",
]
