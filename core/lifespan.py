import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.settings import ServiceSettings
from pipeline.clients.figma_client import FigmaClient
from pipeline.clients.llm_client import LLMClient
from pipeline.orchestrator import RequestOrchestrator

logger = logging.getLogger(__name__)


def build_orchestrator(settings: ServiceSettings) -> RequestOrchestrator:
    """Create the API clients and the orchestrator from explicit settings."""
    figma_client = FigmaClient(
        base_url=settings.figma.FIGMA_API_BASE_URL,
        token=settings.figma.FIGMA_TOKEN.get_secret_value(),
        timeout=settings.figma.FIGMA_REQUEST_TIMEOUT_SECONDS,
    )
    llm_client = LLMClient(
        base_url=settings.llm.OPENAI_BASE_URL,
        api_key=settings.llm.OPENAI_API_KEY.get_secret_value(),
        model=settings.llm.LLM_MODEL,
        timeout=settings.llm.LLM_REQUEST_TIMEOUT_SECONDS,
    )
    return RequestOrchestrator(
        figma_client,
        llm_client,
        search_fallback_sentinel=settings.app.SEARCH_FALLBACK_SENTINEL,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown tasks."""
    settings: ServiceSettings = app.state.settings

    logger.info("Initializing API clients...")
    app.state.orchestrator = build_orchestrator(settings)
    logger.info(
        "Service ready",
        extra={"model": settings.llm.LLM_MODEL},
    )

    yield

    app.state.orchestrator = None
    logger.info("Service stopped")
