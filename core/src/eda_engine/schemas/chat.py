"""Schemas for chat turns and agent executions."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .chart import ChartPayload


class Strategy(str, Enum):
    """Which response path a turn took."""

    DIRECT = "direct"
    VECTOR = "vector"
    EDA_AGENT = "eda_agent"


class Source(BaseModel):
    title: str
    url: str


class HistoryTurn(BaseModel):
    """One stored user/assistant exchange."""

    user: str
    assistant: str


class ToolStep(BaseModel):
    """A single tool invocation recorded during an agent run."""

    tool: str
    input: dict[str, Any] = Field(default_factory=dict)
    observation: str = ""


class AgentRunOutput(BaseModel):
    """Final answer plus the ordered tool invocations of one agent run."""

    output: str = ""
    steps: list[ToolStep] = Field(default_factory=list)


class AgentTurnResult(BaseModel):
    """Outcome of one user message, handed to the persistence layer."""

    response_text: str
    strategy: Strategy = Strategy.DIRECT
    charts: list[ChartPayload] = Field(default_factory=list)
    sources: list[Source] = Field(default_factory=list)


class ChatRequest(BaseModel):
    """Request body for the chat endpoint."""

    message: str = Field(..., min_length=1, description="User message")
    conversation_id: str | None = Field(None, description="Existing conversation to continue")
    file_path: str | None = Field(None, description="Path of the active tabular file, if any")
    system_prompt: str | None = Field(None, description="Optional system prompt for plain chat")
    model: str | None = Field(None, description="Model id override")


class ChatResponse(BaseModel):
    """Response body for the chat endpoint."""

    response: str
    conversation_id: str
    strategy: Strategy
    sources: list[Source] = Field(default_factory=list)
    charts: list[ChartPayload] = Field(default_factory=list)
