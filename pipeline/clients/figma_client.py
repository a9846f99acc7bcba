import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from pipeline.core.config import ERROR_BODY_MAX_CHARS, FIGMA_REQUEST_TIMEOUT_SECONDS
from pipeline.core.exceptions import UpstreamFetchError

logger = logging.getLogger(__name__)


def _error_message(resp: httpx.Response) -> str:
    """Best-effort message from a Figma error body ({"status", "err"})."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("err", "message", "error"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return (resp.text or resp.reason_phrase or "")[:ERROR_BODY_MAX_CHARS]


class FigmaClient:
    """Reads file documents from the Figma REST API."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = FIGMA_REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.token)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"X-Figma-Token": self.token},
            transport=self._transport,
        )

    async def fetch_document(self, file_key: str) -> dict[str, Any]:
        """Fetch a file and return its `document` node.

        Raises:
            UpstreamFetchError: Transport failure, non-2xx status, a body that
                is not JSON, or a body without a `document` object.
        """
        try:
            async with self._client() as client:
                resp = await client.get(f"/files/{quote(file_key, safe='')}")
        except httpx.TimeoutException as e:
            raise UpstreamFetchError(
                "timeout", "Figma request timed out", details={"reason": str(e)}
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamFetchError(
                "unavailable", "Figma API unreachable", details={"reason": str(e)}
            ) from e

        if resp.is_error:
            message = _error_message(resp)
            logger.warning(
                "Figma fetch failed: %s %s",
                resp.status_code,
                message,
                extra={
                    "service": "FIGMA",
                    "upstream_status": resp.status_code,
                    "file_key": file_key,
                },
            )
            raise UpstreamFetchError(
                "http_error",
                f"Figma API error: {message}" if message else "Figma API error",
                upstream_status=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamFetchError(
                "invalid_response",
                "Figma response is not JSON",
                upstream_status=resp.status_code,
            ) from e

        document = data.get("document") if isinstance(data, dict) else None
        if not isinstance(document, dict):
            raise UpstreamFetchError(
                "invalid_response",
                "Figma response has no document",
                upstream_status=resp.status_code,
            )
        return document
