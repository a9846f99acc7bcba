"""Exception handlers that keep every error response a JSON `{"error": ...}` body."""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic_core import ValidationError as PydanticCoreValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.middleware import TRACE_HEADER, ensure_trace_id
from pipeline.core.exceptions import BaseError

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int, message: str, trace_id: str, error_code: str
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers={TRACE_HEADER: trace_id, "X-Error-Code": error_code},
    )


def _describe_validation_errors(errors: list) -> str:
    first_error = errors[0] if errors else {}
    loc = first_error.get("loc", [])
    field = ".".join(str(loc_part) for loc_part in loc if loc_part != "body")
    msg = first_error.get("msg", "Validation failed")
    return f"{field}: {msg}" if field else msg


async def handle_validation_error(request: Request, exc: RequestValidationError):
    """Handler for FastAPI/Pydantic request validation errors (400)."""
    trace_id = ensure_trace_id(request)
    detail = _describe_validation_errors(exc.errors())

    logger.warning(
        f"Validation error: {detail}",
        extra={"trace_id": trace_id, "path": request.url.path},
    )

    return _error_response(
        status.HTTP_400_BAD_REQUEST, f"Invalid request: {detail}", trace_id, "CLIENT_INPUT_ERROR"
    )


async def handle_pydantic_error(request: Request, exc: PydanticCoreValidationError):
    """Handler for Pydantic errors raised outside request parsing (400)."""
    trace_id = ensure_trace_id(request)
    detail = _describe_validation_errors(exc.errors())

    logger.warning(
        f"Pydantic validation failed: {detail}",
        extra={"trace_id": trace_id, "path": request.url.path},
    )

    return _error_response(
        status.HTTP_400_BAD_REQUEST, f"Invalid request: {detail}", trace_id, "CLIENT_INPUT_ERROR"
    )


async def handle_app_error(request: Request, exc: BaseError):
    """Handler for application-specific BaseErrors."""
    trace_id = ensure_trace_id(request)

    log = logger.warning if exc.http_status < 500 else logger.error
    log(
        f"Application error: {exc.message}",
        extra={
            "trace_id": trace_id,
            "error_code": exc.error_code,
            "path": request.url.path,
            "http_status": exc.http_status,
            **{k: v for k, v in exc.details.items() if k in ("service", "error_type", "upstream_status")},
        },
    )

    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
        headers={TRACE_HEADER: trace_id, "X-Error-Code": exc.error_code},
    )


async def handle_http_error(request: Request, exc: StarletteHTTPException):
    """Handler for standard HTTP exceptions (404, 405, 503...)."""
    trace_id = ensure_trace_id(request)

    logger.warning(
        "HTTP exception",
        extra={
            "trace_id": trace_id,
            "http_status": exc.status_code,
            "path": request.url.path,
        },
    )

    return _error_response(exc.status_code, str(exc.detail), trace_id, f"HTTP_{exc.status_code}")


async def handle_unknown_error(request: Request, exc: Exception):
    """Handler for unexpected 500 errors."""
    trace_id = ensure_trace_id(request)

    logger.exception(
        "Unexpected error occurred",
        extra={
            "trace_id": trace_id,
            "path": request.url.path,
            "error_type": type(exc).__name__,
        },
    )

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        trace_id,
        "INTERNAL_SERVER_ERROR",
    )


async def catch_unhandled_errors(request: Request, call_next):
    """Render unexpected exceptions as JSON 500 responses inside the CORS layer."""
    try:
        return await call_next(request)
    except Exception as exc:
        return await handle_unknown_error(request, exc)
