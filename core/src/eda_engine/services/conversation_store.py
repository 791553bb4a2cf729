"""Conversation history seam.

Durable persistence lives outside this engine; the in-memory implementation
keeps the API usable on its own (replace with a database in production).
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Protocol

from ..schemas.chat import AgentTurnResult, HistoryTurn


class ConversationStore(Protocol):
    async def create_conversation(self, title: str) -> str: ...

    async def get_history(self, conversation_id: str, limit: int) -> list[HistoryTurn]: ...

    async def save_turn(self, conversation_id: str, message: str, result: AgentTurnResult) -> None: ...


class InMemoryConversationStore:
    def __init__(self) -> None:
        self._conversations: dict[str, dict[str, Any]] = {}

    async def create_conversation(self, title: str) -> str:
        conversation_id = str(uuid.uuid4())
        self._conversations[conversation_id] = {
            "title": title,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "turns": [],
        }
        return conversation_id

    async def get_history(self, conversation_id: str, limit: int) -> list[HistoryTurn]:
        """Most recent ``limit`` turns, oldest first."""
        conversation = self._conversations.get(conversation_id)
        if not conversation or limit <= 0:
            return []
        return [
            HistoryTurn(user=turn["message"], assistant=turn["result"].response_text)
            for turn in conversation["turns"][-limit:]
        ]

    async def save_turn(self, conversation_id: str, message: str, result: AgentTurnResult) -> None:
        conversation = self._conversations.setdefault(
            conversation_id,
            {"title": message[:30], "created_at": datetime.now(timezone.utc).isoformat(), "turns": []},
        )
        conversation["turns"].append(
            {
                "message": message,
                "result": result,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )
