import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import _AsyncGeneratorContextManager, asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..orchestration.runner import StrandsAgentRunner
from ..orchestration.tools import ChartToolkit
from ..orchestration.turn import TurnOrchestrator
from ..services.chart_compiler import ChartDataService
from ..services.conversation_store import InMemoryConversationStore
from ..services.document_store import InMemoryVectorStore, OpenAIEmbedder
from .config import Settings
from .logger import configure_logging

logger = logging.getLogger(__name__)


def lifespan_factory(
    settings: Settings,
) -> Callable[[FastAPI], _AsyncGeneratorContextManager[object]]:
    """Factory to create a lifespan async context manager for a FastAPI app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[object, None]:
        configure_logging(settings.LOG_LEVEL)

        document_store = InMemoryVectorStore(OpenAIEmbedder(model_id=settings.EMBEDDING_MODEL_ID))
        await document_store.init()

        chart_service = ChartDataService()
        toolkit = ChartToolkit(chart_service)
        app.state.document_store = document_store
        app.state.conversation_store = InMemoryConversationStore()
        app.state.chart_service = chart_service
        app.state.toolkit = toolkit
        app.state.orchestrator = TurnOrchestrator(
            runner=StrandsAgentRunner(temperature=settings.AGENT_TEMPERATURE),
            toolkit=toolkit,
            document_store=document_store,
            timeout_seconds=settings.AGENT_TIMEOUT_SECONDS,
            search_k=settings.VECTOR_SEARCH_K,
        )
        logger.info("%s %s started (%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT.value)

        try:
            yield
        finally:
            await document_store.teardown()

    return lifespan


def create_application(
    router: APIRouter,
    settings: Settings,
    lifespan: Callable[[FastAPI], _AsyncGeneratorContextManager[object]] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    router : APIRouter
        The router with every API route of the application.
    settings : Settings
        Application settings; name, version, CORS origins and log level are read here.
    lifespan : Callable, optional
        Lifespan context manager. Defaults to one built by ``lifespan_factory``.

    Returns
    -------
    FastAPI
        A fully configured FastAPI application.
    """
    application = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        lifespan=lifespan or lifespan_factory(settings),
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.include_router(router)
    return application
