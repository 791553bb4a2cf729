"""API endpoints for chat turns.

A turn is routed by the TurnOrchestrator: with an attached file the EDA agent
may produce charts; without one, the message is answered directly, using
uploaded document context when available.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ...core.config import settings
from ...orchestration.tools import ChartToolkit
from ...orchestration.turn import TurnOrchestrator
from ...schemas.chat import ChatRequest, ChatResponse
from ...services.conversation_store import ConversationStore
from ..dependencies import get_conversation_store, get_orchestrator, get_toolkit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])


class ToolsListResponse(BaseModel):
    """Tools the EDA agent may call."""

    tools: list[dict[str, Any]]


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
    conversations: ConversationStore = Depends(get_conversation_store),
):
    """Handle one user message.

    Example requests:
    - {"message": "show distribution of Age", "file_path": "/data/people.csv"}
    - {"message": "What does the onboarding guide say about refunds?"}
    """
    try:
        conversation_id = request.conversation_id or await conversations.create_conversation(
            request.message[:30]
        )
        history = await conversations.get_history(conversation_id, settings.HISTORY_TURNS)

        result = await orchestrator.handle_turn(
            request.message,
            file_path=request.file_path,
            history=history,
            system_prompt=request.system_prompt,
            model=request.model,
        )
        await conversations.save_turn(conversation_id, request.message, result)

        return ChatResponse(
            response=result.response_text,
            conversation_id=conversation_id,
            strategy=result.strategy,
            sources=result.sources,
            charts=result.charts,
        )

    except Exception as e:
        logger.error("Chat error: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/tools", response_model=ToolsListResponse)
async def list_available_tools(toolkit: ChartToolkit = Depends(get_toolkit)):
    """List the tools offered to the EDA agent with their parameter schema."""
    return ToolsListResponse(tools=[toolkit.describe()])
