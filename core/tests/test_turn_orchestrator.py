"""Tests for turn routing, deadlines and chart collection."""

import asyncio
import json

import httpx
import openai
import pytest
from strands.types.exceptions import ModelThrottledException

from conftest import FakeAgentRunner, SlowAgentRunner
from eda_engine.orchestration.tools import CHART_TOOL_NAME, ChartToolkit
from eda_engine.orchestration.turn import (
    NO_ROWS_MESSAGE,
    RATE_LIMIT_MESSAGE,
    TIMEOUT_MESSAGE,
    TurnOrchestrator,
    collect_charts,
    is_rate_limit_error,
)
from eda_engine.schemas.chat import AgentRunOutput, HistoryTurn, Strategy, ToolStep
from eda_engine.schemas.document import Document


def chart_step(payload) -> ToolStep:
    observation = payload if isinstance(payload, str) else json.dumps(payload)
    return ToolStep(tool=CHART_TOOL_NAME, input={}, observation=observation)


VALID_CHART = {
    "type": "bar",
    "data": [{"City": "Paris", "Count": 3}],
    "xKey": "City",
    "seriesKeys": ["Count"],
    "title": "Cities",
    "description": "",
}


class StubDocumentStore:
    def __init__(self, documents=None, error=None):
        self.documents = documents or []
        self.error = error
        self.queries = []

    async def search(self, query, k=4):
        self.queries.append((query, k))
        if self.error:
            raise self.error
        return self.documents[:k]


class TestCollectCharts:
    """Test extraction of charts from recorded tool steps."""

    def test_keeps_valid_charts_in_order(self):
        second = dict(VALID_CHART, title="Second")
        steps = [
            chart_step(VALID_CHART),
            ToolStep(tool="other_tool", observation=json.dumps(VALID_CHART)),
            chart_step({"error": "No data generated. Check column names or filters."}),
            chart_step("Error: Missing required fields (file_path, chart_type, or x_column). Received Input: {}"),
            chart_step(second),
        ]

        charts = collect_charts(steps)

        assert [chart.title for chart in charts] == ["Cities", "Second"]
        assert charts[0].x_key == "City"

    def test_skips_malformed_payloads(self):
        assert collect_charts([chart_step({"type": "bar"}), chart_step("[1, 2]")]) == []


class TestEdaPath:
    """Test turns with an attached file."""

    @pytest.mark.asyncio
    async def test_distribution_question_end_to_end(self, people_csv):
        toolkit = ChartToolkit()

        async def script(system_prompt, history, message, tools):
            observation = await toolkit.run_generate_chart(
                {"file_path": str(people_csv), "chart_type": "histogram", "x_column": "Age"}
            )
            return AgentRunOutput(
                output="Here is the distribution of Age.",
                steps=[ToolStep(tool=CHART_TOOL_NAME, input={"x_column": "Age"}, observation=observation)],
            )

        runner = FakeAgentRunner(script)
        orchestrator = TurnOrchestrator(runner, toolkit=toolkit, timeout_seconds=5)

        result = await orchestrator.handle_turn("show distribution of Age", file_path=str(people_csv))

        assert result.strategy == Strategy.EDA_AGENT
        assert result.response_text == "Here is the distribution of Age."
        assert len(result.charts) == 1
        assert result.charts[0].x_key == "Age"
        assert result.charts[0].series_keys == ["Frequency"]

    @pytest.mark.asyncio
    async def test_prompt_and_tools(self, people_csv):
        runner = FakeAgentRunner(output="done")
        orchestrator = TurnOrchestrator(runner, timeout_seconds=5)
        history = [HistoryTurn(user="hi", assistant="hello")]

        await orchestrator.handle_turn("plot Age", file_path=str(people_csv), history=history, model="gpt-x")

        call = runner.calls[0]
        assert '"rowCount": 6' in call["system_prompt"]
        assert f"Active File Path: {people_csv}" in call["system_prompt"]
        assert 'User Query: "plot Age"' in call["system_prompt"]
        assert "Fay" not in call["system_prompt"]
        assert call["history"] == history
        assert call["model_id"] == "gpt-x"
        assert len(call["tools"]) == 1

    @pytest.mark.asyncio
    async def test_zero_rows_skips_agent(self, header_only_csv):
        runner = FakeAgentRunner()
        orchestrator = TurnOrchestrator(runner)

        result = await orchestrator.handle_turn("anything", file_path=str(header_only_csv))

        assert result.response_text == NO_ROWS_MESSAGE
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_deadline_cancels_agent(self, people_csv):
        runner = SlowAgentRunner(delay=5)
        orchestrator = TurnOrchestrator(runner, timeout_seconds=0.05)

        result = await orchestrator.handle_turn("plot everything", file_path=str(people_csv))
        await asyncio.sleep(0.01)

        assert result.response_text == TIMEOUT_MESSAGE
        assert result.strategy == Strategy.DIRECT
        assert result.charts == []
        assert runner.cancelled

    @pytest.mark.asyncio
    async def test_rate_limit(self, people_csv):
        async def script(*args):
            raise RuntimeError("Error code: 429 - Rate limit reached for requests")

        result = await TurnOrchestrator(FakeAgentRunner(script)).handle_turn("plot", file_path=str(people_csv))

        assert result.response_text == RATE_LIMIT_MESSAGE
        assert result.strategy == Strategy.DIRECT

    @pytest.mark.asyncio
    async def test_other_failures(self, people_csv):
        async def script(*args):
            raise RuntimeError("model exploded")

        result = await TurnOrchestrator(FakeAgentRunner(script)).handle_turn("plot", file_path=str(people_csv))

        assert result.response_text == "Failed to analyze data: model exploded"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        runner = FakeAgentRunner()
        result = await TurnOrchestrator(runner).handle_turn("plot", file_path=str(tmp_path / "gone.csv"))

        assert result.response_text.startswith("Failed to analyze data: File not found:")
        assert runner.calls == []


    @pytest.mark.asyncio
    async def test_missing_file_named_like_a_status_code(self):
        result = await TurnOrchestrator(FakeAgentRunner()).handle_turn("plot", file_path="no-such-dir/q4290.csv")

        assert result.response_text != RATE_LIMIT_MESSAGE
        assert result.response_text.startswith("Failed to analyze data: File not found:")


class TestRateLimitDetection:
    """Test which provider errors count as rate limiting."""

    def test_openai_rate_limit_error(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        exc = openai.RateLimitError("quota", response=httpx.Response(429, request=request), body=None)

        assert is_rate_limit_error(exc)

    def test_strands_throttling(self):
        assert is_rate_limit_error(ModelThrottledException("slow down"))

    def test_status_code_attribute(self):
        exc = RuntimeError("upstream refused")
        exc.status_code = 429

        assert is_rate_limit_error(exc)

    @pytest.mark.parametrize("text", ["Error code: 429 - busy", "Rate limit reached for requests"])
    def test_message_fallback(self, text):
        assert is_rate_limit_error(RuntimeError(text))

    @pytest.mark.parametrize("text", ["File not found: /data/q4290.csv", "row 14291 is malformed"])
    def test_unrelated_numbers(self, text):
        assert not is_rate_limit_error(RuntimeError(text))


class TestDirectPath:
    """Test turns without an attached file."""

    @pytest.mark.asyncio
    async def test_vector_context(self):
        store = StubDocumentStore([Document(page_content="Refunds take 5 days."), Document(page_content="Ship free.")])
        runner = FakeAgentRunner(output="Refunds take 5 days.")
        orchestrator = TurnOrchestrator(runner, document_store=store, search_k=2)

        result = await orchestrator.handle_turn("how long do refunds take?")

        assert result.strategy == Strategy.VECTOR
        assert [source.model_dump() for source in result.sources] == [{"title": "Document Context", "url": "#"}]
        assert store.queries == [("how long do refunds take?", 2)]
        prompt = runner.calls[0]["system_prompt"]
        assert "Context from uploaded documents:\nRefunds take 5 days.\n\nShip free." in prompt
        assert runner.calls[0]["tools"] == []

    @pytest.mark.asyncio
    async def test_search_failure_falls_back_to_direct(self):
        runner = FakeAgentRunner(output="hello")
        orchestrator = TurnOrchestrator(runner, document_store=StubDocumentStore(error=RuntimeError("down")))

        result = await orchestrator.handle_turn("hi", system_prompt="Be brief.")

        assert result.strategy == Strategy.DIRECT
        assert result.sources == []
        assert result.response_text == "hello"
        assert runner.calls[0]["system_prompt"].startswith("Be brief.\n\n[INSTRUCTIONS]:")

    @pytest.mark.asyncio
    async def test_empty_search_is_direct(self):
        result = await TurnOrchestrator(FakeAgentRunner(), document_store=StubDocumentStore()).handle_turn("hi")
        assert result.strategy == Strategy.DIRECT

    @pytest.mark.asyncio
    async def test_model_failure(self):
        async def script(*args):
            raise RuntimeError("upstream 500")

        result = await TurnOrchestrator(FakeAgentRunner(script)).handle_turn("hi")

        assert result.response_text == "Failed to generate a response: upstream 500"
