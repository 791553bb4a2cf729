"""Accessors for the lifespan-owned services stored on ``app.state``."""

from fastapi import Request

from ..orchestration.tools import ChartToolkit
from ..orchestration.turn import TurnOrchestrator
from ..services.chart_compiler import ChartDataService
from ..services.conversation_store import ConversationStore
from ..services.document_store import DocumentStore


def get_orchestrator(request: Request) -> TurnOrchestrator:
    return request.app.state.orchestrator


def get_conversation_store(request: Request) -> ConversationStore:
    return request.app.state.conversation_store


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


def get_chart_service(request: Request) -> ChartDataService:
    return request.app.state.chart_service


def get_toolkit(request: Request) -> ChartToolkit:
    return request.app.state.toolkit
