"""Shared fixtures for engine tests."""

import asyncio
import csv
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from eda_engine.schemas.chat import AgentRunOutput, HistoryTurn


def write_csv(path: Path, header: list[str], rows: list[list[Any]]) -> Path:
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(header)
        writer.writerows(rows)
    return path


@pytest.fixture
def people_csv(tmp_path: Path) -> Path:
    """Small table with a numeric, a categorical and a dirty numeric column."""
    return write_csv(
        tmp_path / "people.csv",
        ["Name", "Age", "City", "Salary"],
        [
            ["Ann", "34", "Paris", "$52,000"],
            ["Bob", "28", "Berlin", "61000"],
            ["Cid", "45", "Paris", "47000"],
            ["Dee", "", "Rome", "n/a"],
            ["Eve", "39", "Berlin", "58000"],
            ["Fay", "51", "Paris", "72000"],
        ],
    )


@pytest.fixture
def cars_csv(tmp_path: Path) -> Path:
    return write_csv(
        tmp_path / "cars.csv",
        ["Model", "Price"],
        [["A", "5000"], ["B", "12000"], ["C", "$15,000"], ["D", "N/A"]],
    )


@pytest.fixture
def header_only_csv(tmp_path: Path) -> Path:
    return write_csv(tmp_path / "empty.csv", ["Name", "Age"], [])


RunScript = Callable[[str, Sequence[HistoryTurn], str, Sequence[Any]], Awaitable[AgentRunOutput]]


class FakeAgentRunner:
    """Stands in for the LLM: records calls and delegates to a script."""

    def __init__(self, script: RunScript | None = None, output: str = "ok"):
        self.script = script
        self.output = output
        self.calls: list[dict[str, Any]] = []

    async def run(self, system_prompt, history, message, tools=(), model_id=None) -> AgentRunOutput:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "history": list(history),
                "message": message,
                "tools": list(tools),
                "model_id": model_id,
            }
        )
        if self.script is not None:
            return await self.script(system_prompt, history, message, tools)
        return AgentRunOutput(output=self.output)


class SlowAgentRunner:
    """Never finishes within a short deadline; records cancellation."""

    def __init__(self, delay: float = 5.0):
        self.delay = delay
        self.cancelled = False

    async def run(self, system_prompt, history, message, tools=(), model_id=None) -> AgentRunOutput:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return AgentRunOutput(output="too late")


class KeywordEmbedder:
    """Deterministic embedder: one dimension per keyword plus a bias term."""

    KEYWORDS = ("cat", "dog", "fish")

    def __init__(self):
        self.calls = 0
        self.closed = False

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls += 1
        return [[float(text.lower().count(word)) for word in self.KEYWORDS] + [0.1] for text in texts]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_runner() -> FakeAgentRunner:
    return FakeAgentRunner()


@pytest.fixture
def keyword_embedder() -> KeywordEmbedder:
    return KeywordEmbedder()
