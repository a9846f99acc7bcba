from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from api.schemas import HealthResponse

router = APIRouter()

SERVICE_NAME = "figma-insights-service"
SERVICE_VERSION = "1.0.0"


@router.get("/", response_class=PlainTextResponse, tags=["health"])
async def root():
    return "Hello from your MCP!"


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(request: Request):
    orchestrator = getattr(request.app.state, "orchestrator", None)
    figma_configured = bool(orchestrator and orchestrator.figma_client.configured)
    llm_configured = bool(orchestrator and orchestrator.llm_client.configured)
    healthy = orchestrator is not None and figma_configured and llm_configured

    return JSONResponse(
        status_code=200 if orchestrator is not None else 503,
        content={
            "status": "healthy" if healthy else "degraded",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "figma_configured": figma_configured,
            "llm_configured": llm_configured,
        },
    )
