"""Agent execution seam.

The turn orchestrator talks to an AgentRunner rather than to Strands
directly, so the loop can be swapped out in tests.
"""

import logging
import os
from collections.abc import Sequence
from typing import Any, Protocol

from strands import Agent
from strands.models.openai import OpenAIModel

from ..core.config import settings
from ..schemas.chat import AgentRunOutput, HistoryTurn
from .hooks import ToolCallRecorder, ToolCallRecorderHook

logger = logging.getLogger(__name__)


class AgentRunner(Protocol):
    async def run(
        self,
        system_prompt: str,
        history: Sequence[HistoryTurn],
        message: str,
        tools: Sequence[Any] = (),
        model_id: str | None = None,
    ) -> AgentRunOutput: ...


def history_to_messages(history: Sequence[HistoryTurn]) -> list[dict[str, Any]]:
    """Convert stored turns to Strands conversation messages, oldest first."""
    messages: list[dict[str, Any]] = []
    for turn in history:
        messages.append({"role": "user", "content": [{"text": turn.user}]})
        messages.append({"role": "assistant", "content": [{"text": turn.assistant}]})
    return messages


class StrandsAgentRunner:
    """Runs a tool-calling Strands agent backed by an OpenAI-compatible model."""

    def __init__(self, temperature: float | None = None, max_tokens: int | None = None):
        self.temperature = settings.AGENT_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.AGENT_MAX_TOKENS

    def _build_strands_model(self, model_id: str | None = None) -> OpenAIModel:
        model_id = (
            model_id
            or settings.STRANDS_MODEL_ID
            or settings.OPENAI_MODEL_ID
            or os.getenv("STRANDS_MODEL_ID")
            or "gpt-4o-mini"
        )
        client_args: dict[str, Any] = {}
        if settings.OPENAI_API_KEY:
            client_args["api_key"] = settings.OPENAI_API_KEY.get_secret_value()
        return OpenAIModel(
            client_args=client_args,
            model_id=model_id,
            params={
                "max_tokens": self.max_tokens,
                "temperature": self.temperature,
            },
        )

    async def run(
        self,
        system_prompt: str,
        history: Sequence[HistoryTurn],
        message: str,
        tools: Sequence[Any] = (),
        model_id: str | None = None,
    ) -> AgentRunOutput:
        recorder = ToolCallRecorder()
        agent = Agent(
            name="eda_chat_agent",
            model=self._build_strands_model(model_id),
            system_prompt=system_prompt,
            messages=history_to_messages(history),
            tools=list(tools),
            hooks=[ToolCallRecorderHook(recorder)],
            callback_handler=None,
        )
        result = await agent.invoke_async(message)
        steps = recorder.steps
        logger.info("Agent run finished with %s tool call(s)", len(steps))
        return AgentRunOutput(output=str(result).strip(), steps=steps)
