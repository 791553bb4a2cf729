"""Turn-level orchestration for the chat endpoint.

One user message is handled either by the EDA agent (when a tabular file is
attached) or by a plain model call with optional document context. Either
way a well-formed AgentTurnResult comes back; failures are folded into the
response text.
"""

import asyncio
import json
import logging
import re
from collections.abc import Coroutine, Sequence
from typing import Any

import openai
from pydantic import ValidationError
from strands.types.exceptions import ModelThrottledException

from ..config.prompts import build_chat_system_prompt, build_document_context, build_eda_prompt
from ..core.config import settings
from ..schemas.chart import ChartPayload
from ..schemas.chat import AgentRunOutput, AgentTurnResult, HistoryTurn, Source, Strategy, ToolStep
from ..services.document_store import DocumentStore
from ..services.profiler import profile_file
from .runner import AgentRunner
from .tools import CHART_TOOL_NAME, ChartToolkit

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Analysis timed out. Please try a simpler request."
RATE_LIMIT_MESSAGE = (
    "⚠️ **Daily Limit Reached**: The free AI tier has hit its daily limit (100k tokens). "
    "Please try again later or upgrade your plan."
)
NO_ROWS_MESSAGE = "The uploaded file has no data rows to analyze."
DOCUMENT_SOURCE = Source(title="Document Context", url="#")
# Bare "429" status in provider error text, not part of a longer number.
RATE_LIMIT_STATUS = re.compile(r"(?<!\d)429(?!\d)")


class AgentDeadlineExceeded(Exception):
    """The agent did not produce a final answer before the turn deadline."""


def is_rate_limit_error(exc: BaseException) -> bool:
    if isinstance(exc, (openai.RateLimitError, ModelThrottledException)):
        return True
    if getattr(exc, "status_code", None) == 429:
        return True
    text = str(exc)
    return RATE_LIMIT_STATUS.search(text) is not None or "rate limit" in text.lower()


def _consume_task_result(task: asyncio.Task) -> None:
    try:
        task.result()
    except asyncio.CancelledError:
        return
    except Exception as exc:
        logger.debug("Abandoned agent task finished with error: %s", exc)


def collect_charts(steps: Sequence[ToolStep]) -> list[ChartPayload]:
    """Charts produced by chart tool calls, in invocation order.

    Error observations are skipped; unparseable ones are logged and skipped.
    """
    charts: list[ChartPayload] = []
    for step in steps:
        if step.tool != CHART_TOOL_NAME:
            continue
        try:
            observation = json.loads(step.observation)
        except (TypeError, ValueError):
            logger.warning("Skipping non-JSON chart observation: %.120s", step.observation)
            continue
        if not isinstance(observation, dict) or "error" in observation:
            continue
        try:
            charts.append(ChartPayload.model_validate(observation))
        except ValidationError as exc:
            logger.warning("Skipping malformed chart payload: %s", exc.errors()[0].get("msg"))
    return charts


class TurnOrchestrator:
    """Handles one chat turn end to end."""

    def __init__(
        self,
        runner: AgentRunner,
        toolkit: ChartToolkit | None = None,
        document_store: DocumentStore | None = None,
        timeout_seconds: float | None = None,
        search_k: int | None = None,
    ):
        self.runner = runner
        self.toolkit = toolkit or ChartToolkit()
        self.document_store = document_store
        self.timeout_seconds = settings.AGENT_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        self.search_k = search_k or settings.VECTOR_SEARCH_K

    async def handle_turn(
        self,
        message: str,
        file_path: str | None = None,
        history: Sequence[HistoryTurn] | None = None,
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> AgentTurnResult:
        history = list(history or [])
        if file_path:
            return await self._analyze_file(message, file_path, history, model)
        return await self._answer_directly(message, history, system_prompt, model)

    async def _analyze_file(
        self,
        message: str,
        file_path: str,
        history: list[HistoryTurn],
        model: str | None,
    ) -> AgentTurnResult:
        try:
            profile = await asyncio.to_thread(profile_file, file_path)
            if profile.is_empty:
                return AgentTurnResult(response_text=NO_ROWS_MESSAGE, strategy=Strategy.EDA_AGENT)

            system_prompt = build_eda_prompt(profile, file_path, message)
            run = await self._run_with_deadline(
                self.runner.run(
                    system_prompt,
                    history,
                    message,
                    tools=[self.toolkit.generate_chart],
                    model_id=model,
                )
            )
        except AgentDeadlineExceeded:
            logger.warning("EDA agent exceeded %ss deadline for %s", self.timeout_seconds, file_path)
            return AgentTurnResult(response_text=TIMEOUT_MESSAGE)
        except Exception as exc:
            logger.error("EDA agent error: %s", exc, exc_info=True)
            if is_rate_limit_error(exc):
                return AgentTurnResult(response_text=RATE_LIMIT_MESSAGE)
            return AgentTurnResult(response_text=f"Failed to analyze data: {exc}")

        charts = collect_charts(run.steps)
        logger.info("EDA turn produced %s chart(s) from %s tool call(s)", len(charts), len(run.steps))
        return AgentTurnResult(response_text=run.output, strategy=Strategy.EDA_AGENT, charts=charts)

    async def _answer_directly(
        self,
        message: str,
        history: list[HistoryTurn],
        system_prompt: str | None,
        model: str | None,
    ) -> AgentTurnResult:
        strategy = Strategy.DIRECT
        sources: list[Source] = []
        context = ""

        passages = await self._search_documents(message)
        if passages:
            context = build_document_context(passages)
            sources = [DOCUMENT_SOURCE]
            strategy = Strategy.VECTOR

        try:
            run = await self.runner.run(
                build_chat_system_prompt(system_prompt, context),
                history,
                message,
                tools=[],
                model_id=model,
            )
        except Exception as exc:
            logger.error("Chat model error: %s", exc, exc_info=True)
            if is_rate_limit_error(exc):
                text = RATE_LIMIT_MESSAGE
            else:
                text = f"Failed to generate a response: {exc}"
            return AgentTurnResult(response_text=text, strategy=strategy, sources=sources)

        return AgentTurnResult(response_text=run.output, strategy=strategy, sources=sources)

    async def _search_documents(self, message: str) -> list[str]:
        if self.document_store is None:
            return []
        try:
            documents = await self.document_store.search(message, k=self.search_k)
        except Exception as exc:
            logger.info("Document search unavailable, answering directly: %s", exc)
            return []
        return [doc.page_content for doc in documents]

    async def _run_with_deadline(self, run: Coroutine[Any, Any, AgentRunOutput]) -> AgentRunOutput:
        """Race the agent run against the turn deadline.

        On expiry the task is cancelled and abandoned; its eventual outcome is
        consumed so it is never reported as an unretrieved exception.
        """
        task = asyncio.create_task(run)
        try:
            done, _ = await asyncio.wait({task}, timeout=self.timeout_seconds)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if task not in done:
            task.cancel()
            task.add_done_callback(_consume_task_result)
            raise AgentDeadlineExceeded(TIMEOUT_MESSAGE)
        return task.result()
