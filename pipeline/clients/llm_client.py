import logging
from http import HTTPStatus
from typing import Any, Dict, NoReturn, Optional

import httpx

from pipeline.core.config import ERROR_BODY_MAX_CHARS, LLM_REQUEST_TIMEOUT_SECONDS
from pipeline.core.exceptions import UpstreamModelError
from pipeline.models.dto import ChatCompletion

logger = logging.getLogger(__name__)


def _raise_llm_error(
    error_type: str,
    details: Dict[str, Any],
    exc: Optional[Exception] = None,
) -> NoReturn:
    logger.warning(
        "LLM call failed: %s",
        error_type,
        extra={"service": "LLM", "error_type": error_type, **_log_fields(details)},
    )
    raise UpstreamModelError(error_type=error_type, details=details) from exc


def _log_fields(details: Dict[str, Any]) -> Dict[str, Any]:
    if "http_code" in details:
        return {"upstream_status": details["http_code"]}
    return {}


def extract_message_content(data: Dict[str, Any]) -> Optional[str]:
    """Return choices[0].message.content, or None when the envelope differs."""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if content is None:
        return ""
    return content if isinstance(content, str) else None


def extract_total_tokens(data: Dict[str, Any]) -> Optional[int]:
    usage = data.get("usage")
    if isinstance(usage, dict) and isinstance(usage.get("total_tokens"), int):
        return usage["total_tokens"]
    return None


class LLMClient:
    """Client for an OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = LLM_REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.api_key}"},
            transport=self._transport,
        )

    async def complete(
        self,
        instruction: str,
        content: str,
        *,
        temperature: float = 0.2,
        max_tokens: int = 1000,
    ) -> ChatCompletion:
        """
        Send one system + user exchange and return the raw assistant text.

        Raises:
            UpstreamModelError: On any network, HTTP or envelope failure.
        """
        payload = {
            "model": self.model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "messages": [
                {"role": "system", "content": instruction},
                {"role": "user", "content": content},
            ],
        }

        try:
            async with self._client() as client:
                resp = await client.post("/chat/completions", json=payload)
        except httpx.TimeoutException as e:
            _raise_llm_error("timeout", {"reason": str(e)}, e)
        except httpx.HTTPError as e:
            _raise_llm_error("unavailable", {"reason": str(e)}, e)

        if resp.is_error:
            _raise_llm_error(
                "rate_limit"
                if resp.status_code == HTTPStatus.TOO_MANY_REQUESTS
                else "http_error",
                {
                    "http_code": resp.status_code,
                    "body": (resp.text or "")[:ERROR_BODY_MAX_CHARS],
                },
            )

        try:
            data = resp.json()
        except ValueError as e:
            _raise_llm_error(
                "invalid_response",
                {"body": (resp.text or "")[:ERROR_BODY_MAX_CHARS]},
                e,
            )

        text = extract_message_content(data) if isinstance(data, dict) else None
        if text is None:
            _raise_llm_error("invalid_response", {"reason": "missing choices[0].message"})

        return ChatCompletion(
            content=text,
            total_tokens=extract_total_tokens(data),
            model=data.get("model"),
        )
