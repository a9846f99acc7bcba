"""
Per-request orchestration for the frame search and flow analysis endpoints.

Each request runs the same short state machine and stops at the first
failure:

    receive input -> (fetch document) -> build prompt -> call model
    -> extract JSON -> check shape -> respond

There is exactly one model call per request and nothing is retried;
failures surface as BaseError subclasses that the HTTP layer renders.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from pipeline.core.config import (
    FLOW_MAX_TOKENS,
    FLOW_TEMPERATURE,
    RAW_TEXT_LOG_MAX_CHARS,
    SEARCH_MAX_TOKENS,
    SEARCH_TEMPERATURE,
    SENTINEL_CONFIDENCE,
    SENTINEL_FRAME_NAME,
)
from pipeline.core.exceptions import (
    ClientInputError,
    ExtractionFailure,
    ShapeMismatchError,
)
from pipeline.models.dto import ChatCompletion, DiagramPayload, Prompt, PromptKind
from pipeline.processors.prompt_builder import build_prompt
from pipeline.processors.response_extractor import Failed, extract
from pipeline.processors.result_validator import ShapeError, validate_result
from pipeline.processors.tree_flattener import flatten
from pipeline.utils.timing import StageTimers

logger = logging.getLogger(__name__)


class DocumentSource(Protocol):
    async def fetch_document(self, file_key: str) -> dict[str, Any]: ...


class ModelClient(Protocol):
    async def complete(
        self,
        instruction: str,
        content: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> ChatCompletion: ...


def sentinel_result(reason: str) -> list[dict[str, str]]:
    """Single placeholder search result that keeps the plugin UI usable."""
    return [
        {
            "name": SENTINEL_FRAME_NAME,
            "reason": reason,
            "confidence": SENTINEL_CONFIDENCE,
        }
    ]


class RequestOrchestrator:
    """
    Composes flattening, prompting, the model call, extraction and shape
    validation for one request at a time. Holds no per-request state.

    Args:
      figma_client: Document source used by frame search.
      llm_client: Chat-completions client used by both endpoints.
      search_fallback_sentinel: Answer frame search with a 200 sentinel
        result instead of 502 when the model output is unusable.
    """

    def __init__(
        self,
        figma_client: DocumentSource,
        llm_client: ModelClient,
        *,
        search_fallback_sentinel: bool = False,
    ):
        self.figma_client = figma_client
        self.llm_client = llm_client
        self.search_fallback_sentinel = search_fallback_sentinel

    async def _ask_model(
        self,
        prompt: Prompt,
        timers: StageTimers,
        *,
        temperature: float,
        max_tokens: int,
    ) -> ChatCompletion:
        with timers.timer("llm"):
            return await self.llm_client.complete(
                prompt.instruction,
                prompt.content,
                temperature=temperature,
                max_tokens=max_tokens,
            )

    def _parse(
        self,
        kind: PromptKind,
        completion: ChatCompletion,
        trace_id: Optional[str],
    ) -> Any:
        """Extract and shape-check the model answer, raising on failure."""
        extraction = extract(completion.content)
        if isinstance(extraction, Failed):
            logger.error(
                "Model output is not JSON: %s",
                extraction.reason,
                extra={
                    "trace_id": trace_id,
                    "raw_text": extraction.raw_text[:RAW_TEXT_LOG_MAX_CHARS],
                },
            )
            raise ExtractionFailure(raw_text=extraction.raw_text)

        check = validate_result(kind, extraction.value)
        if isinstance(check, ShapeError):
            logger.error(
                "Model output has shape %s, expected %s",
                check.actual,
                check.expected,
                extra={
                    "trace_id": trace_id,
                    "raw_text": completion.content[:RAW_TEXT_LOG_MAX_CHARS],
                },
            )
            raise ShapeMismatchError(
                expected=check.expected, actual=check.actual, value=check.value
            )
        return check.value

    async def search_frames(
        self,
        query: Optional[str],
        file_key: Optional[str],
        *,
        trace_id: Optional[str] = None,
    ) -> list[Any]:
        """
        Find the frames of a Figma file that match a free-text query.

        Raises:
          ClientInputError: query or file_key missing.
          UpstreamFetchError: the Figma fetch failed.
          UpstreamModelError: the model call failed.
          ExtractionFailure, ShapeMismatchError: unusable model output
            (unless the sentinel fallback is enabled).
        """
        query = (query or "").strip()
        file_key = (file_key or "").strip()
        if not query or not file_key:
            raise ClientInputError(
                "Missing query or fileKey",
                field="query" if not query else "fileKey",
            )

        timers = StageTimers()

        with timers.timer("figma"):
            document = await self.figma_client.fetch_document(file_key)

        with timers.timer("flatten"):
            records = flatten(document)

        if not records:
            logger.info(
                "[SEARCH] no frames in file",
                extra={"trace_id": trace_id, "file_key": file_key, "frames": 0},
            )
            return []

        prompt = build_prompt(PromptKind.FRAME_SEARCH, records, query=query)
        completion = await self._ask_model(
            prompt,
            timers,
            temperature=SEARCH_TEMPERATURE,
            max_tokens=SEARCH_MAX_TOKENS,
        )

        try:
            with timers.timer("parse"):
                results = self._parse(PromptKind.FRAME_SEARCH, completion, trace_id)
        except (ExtractionFailure, ShapeMismatchError) as e:
            if not self.search_fallback_sentinel:
                raise
            logger.warning(
                "[SEARCH] returning sentinel result",
                extra={"trace_id": trace_id, "error_code": e.error_code},
            )
            results = sentinel_result(e.message)

        logger.info(
            "[SEARCH] ok (%.1fs, %s tok)",
            timers.elapsed_ms() / 1000,
            completion.total_tokens if completion.total_tokens is not None else "?",
            extra={
                "trace_id": trace_id,
                "endpoint": "search",
                "file_key": file_key,
                "frames": len(records),
                "results": len(results),
                **timers.telemetry(),
                "total_tokens": completion.total_tokens,
                "model": completion.model,
            },
        )
        return results

    async def analyze_flow(
        self,
        payload: Optional[DiagramPayload],
        *,
        trace_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Ask the model for UX insights on a user-journey diagram.

        Raises:
          ClientInputError: payload missing.
          UpstreamModelError: the model call failed.
          ExtractionFailure, ShapeMismatchError: unusable model output.
        """
        if payload is None:
            raise ClientInputError("No diagramPayload provided", field="diagramPayload")

        timers = StageTimers()
        counts = {
            "steps": len(payload.steps),
            "connectors": len(payload.connectors),
            "free_text": len(payload.free_text),
        }
        logger.info("[FLOW] analyse", extra={"trace_id": trace_id, **counts})

        prompt = build_prompt(PromptKind.FLOW_ANALYSIS, payload)
        completion = await self._ask_model(
            prompt,
            timers,
            temperature=FLOW_TEMPERATURE,
            max_tokens=FLOW_MAX_TOKENS,
        )

        with timers.timer("parse"):
            result = self._parse(PromptKind.FLOW_ANALYSIS, completion, trace_id)

        logger.info(
            "[FLOW] ok (%.1fs, %s tok)",
            timers.elapsed_ms() / 1000,
            completion.total_tokens if completion.total_tokens is not None else "?",
            extra={
                "trace_id": trace_id,
                "endpoint": "flow-analyze",
                **timers.telemetry(),
                "total_tokens": completion.total_tokens,
                "model": completion.model,
                **counts,
            },
        )
        return result
