"""Frame search endpoint."""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends

from api.schemas import ErrorResponse, SearchRequest
from core.dependencies import get_orchestrator, get_trace_id
from pipeline.orchestrator import RequestOrchestrator

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/search",
    tags=["frame-search"],
    responses={
        200: {"description": "Matching frames: [{name, reason, confidence}]"},
        400: {"description": "Missing query or fileKey", "model": ErrorResponse},
        502: {"description": "Figma or model failure", "model": ErrorResponse},
    },
)
async def search_frames(
    body: Optional[SearchRequest] = None,
    orchestrator: RequestOrchestrator = Depends(get_orchestrator),
    trace_id: Optional[str] = Depends(get_trace_id),
) -> List[Any]:
    body = body or SearchRequest()

    logger.info(
        "[NEW REQUEST] search file=%s",
        body.file_key,
        extra={"trace_id": trace_id, "endpoint": "search", "file_key": body.file_key},
    )

    return await orchestrator.search_frames(
        body.query,
        body.file_key,
        trace_id=trace_id,
    )
