"""Strands hook that records tool invocations for an agent run."""

from __future__ import annotations

import json
import logging
from typing import Any

from strands.hooks import AfterToolCallEvent, BeforeToolCallEvent, HookProvider, HookRegistry

from ..schemas.chat import ToolStep

logger = logging.getLogger(__name__)


class ToolCallRecorder:
    """Ordered record of the tool calls made during one agent run."""

    def __init__(self) -> None:
        self._calls: list[dict[str, Any]] = []
        self._sequence = 0

    def start(self, tool_use_id: str | None, tool_name: str, tool_input: Any) -> str:
        self._sequence += 1
        if not tool_use_id:
            tool_use_id = f"tool_{self._sequence}"
        self._calls.append(
            {
                "tool_use_id": tool_use_id,
                "tool": tool_name,
                "input": tool_input if isinstance(tool_input, dict) else {},
                "observation": "",
                "status": "running",
            }
        )
        return tool_use_id

    def finish(self, tool_use_id: str | None, observation: str, error: str | None = None) -> None:
        for call in reversed(self._calls):
            if (tool_use_id and call["tool_use_id"] == tool_use_id) or (
                not tool_use_id and call["status"] == "running"
            ):
                call["observation"] = observation
                call["status"] = "error" if error else "success"
                if error:
                    call["error"] = error
                return

    @property
    def steps(self) -> list[ToolStep]:
        """Completed calls, in invocation order."""
        return [
            ToolStep(tool=call["tool"], input=call["input"], observation=call["observation"])
            for call in self._calls
            if call["status"] != "running"
        ]


def format_tool_content(content: Any) -> str:
    """Flatten a Strands tool result content list into plain text."""
    if content is None:
        return ""
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict):
                if "text" in item:
                    parts.append(str(item.get("text", "")))
                elif "json" in item:
                    parts.append(json.dumps(item.get("json"), default=str))
            else:
                parts.append(str(item))
        return "".join(parts)
    if isinstance(content, dict):
        return json.dumps(content, default=str)
    return str(content)


class ToolCallRecorderHook(HookProvider):
    """Feeds Before/After tool call events into a ToolCallRecorder."""

    def __init__(self, recorder: ToolCallRecorder) -> None:
        self.recorder = recorder

    def register_hooks(self, registry: HookRegistry) -> None:
        registry.add_callback(BeforeToolCallEvent, self.on_tool_start)
        registry.add_callback(AfterToolCallEvent, self.on_tool_end)

    def on_tool_start(self, event: BeforeToolCallEvent) -> None:
        tool_name = event.tool_use.get("name", "unknown")
        tool_use_id = self.recorder.start(
            event.tool_use.get("toolUseId"),
            tool_name,
            event.tool_use.get("input"),
        )
        event.tool_use["toolUseId"] = tool_use_id
        logger.info("Tool started: %s", tool_name)

    def on_tool_end(self, event: AfterToolCallEvent) -> None:
        tool_name = event.tool_use.get("name", "unknown")
        exception = getattr(event, "exception", None)
        result = event.result or {}
        observation = format_tool_content(result.get("content") if isinstance(result, dict) else result)
        self.recorder.finish(
            event.tool_use.get("toolUseId"),
            observation,
            error=str(exception) if exception else None,
        )
        if exception:
            logger.warning("Tool completed with error: %s (%s)", tool_name, exception)
        else:
            logger.info("Tool completed: %s", tool_name)
