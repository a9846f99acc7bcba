"""User-journey flow analysis endpoint."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from api.schemas import ErrorResponse, FlowAnalysis, FlowAnalyzeRequest
from core.dependencies import get_orchestrator, get_trace_id
from pipeline.orchestrator import RequestOrchestrator

router = APIRouter()


@router.post(
    "/flow-analyze",
    tags=["flow-analysis"],
    responses={
        200: {"description": "Insights object produced by the model", "model": FlowAnalysis},
        400: {"description": "Missing or malformed diagramPayload", "model": ErrorResponse},
        502: {"description": "Model failure or unusable answer", "model": ErrorResponse},
    },
)
async def analyze_flow(
    body: Optional[FlowAnalyzeRequest] = None,
    orchestrator: RequestOrchestrator = Depends(get_orchestrator),
    trace_id: Optional[str] = Depends(get_trace_id),
) -> Dict[str, Any]:
    payload = body.diagram_payload if body else None
    return await orchestrator.analyze_flow(payload, trace_id=trace_id)
