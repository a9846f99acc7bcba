"""Request tracing middleware."""

import uuid

from fastapi import Request

TRACE_HEADER = "X-Trace-ID"
MAX_TRACE_ID_LENGTH = 64


def ensure_trace_id(request: Request) -> str:
    """Return the request's trace id, assigning one on first use.

    A trace id sent by the plugin in `X-Trace-ID` is reused so both sides
    log the same value; otherwise a fresh UUID4 is generated.
    """
    trace_id = getattr(request.state, "trace_id", None)
    if trace_id:
        return trace_id

    incoming = (request.headers.get(TRACE_HEADER) or "").strip()
    trace_id = incoming[:MAX_TRACE_ID_LENGTH] or str(uuid.uuid4())
    request.state.trace_id = trace_id
    return trace_id


async def trace_id_middleware(request: Request, call_next):
    """Attach the trace id to request state and to every response."""
    trace_id = ensure_trace_id(request)
    response = await call_next(request)
    response.headers[TRACE_HEADER] = trace_id
    return response
