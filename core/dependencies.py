"""FastAPI dependency injection functions.

Routes get their collaborators from app state through these functions,
so tests can swap them with `app.dependency_overrides`.
"""

from fastapi import HTTPException, Request, status

from pipeline.orchestrator import RequestOrchestrator


async def get_orchestrator(request: Request) -> RequestOrchestrator:
    """Get the request orchestrator from app state.

    Raises:
        HTTPException: 503 if the orchestrator was not initialized
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)

    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )

    return orchestrator


def get_trace_id(request: Request) -> str | None:
    return getattr(request.state, "trace_id", None)
