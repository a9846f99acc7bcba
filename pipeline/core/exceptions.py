"""Exception hierarchy for the frame insights service.

Every error raised on purpose inherits from BaseError and carries enough
structured information for the HTTP layer to render a JSON error body
without knowing where the failure happened.
"""

from typing import Any, Optional
from enum import Enum


class ErrorCategory(str, Enum):
    """Error categories for classification and monitoring."""

    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    EXTERNAL_SERVICE = "external_service"


class BaseError(Exception):
    """Base exception for all service errors.

    Attributes:
        message: Human-readable error message (shown to the caller)
        error_code: Application-specific error code
        category: Error category for classification
        http_status: HTTP status code to return
        details: Additional context for logs (never shown to the caller)
        retryable: Whether the caller may retry the request
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        http_status: int,
        details: Optional[dict[str, Any]] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.http_status = http_status
        self.details = details or {}
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON error body returned to the plugin."""
        return {"error": self.message}


class ClientError(BaseError):
    """Base for client errors (4xx). Never retryable."""

    def __init__(self, message: str, error_code: str, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.CLIENT_ERROR,
            http_status=kwargs.pop("http_status", 400),
            retryable=False,
            **kwargs,
        )


class ClientInputError(ClientError):
    """A required request field is absent or malformed (400).

    Args:
        message: Error text returned to the caller
        field: Name of the offending field, if known
    """

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        additional_details = kwargs.pop("details", {})
        if field:
            additional_details["field"] = field
        super().__init__(
            message=message,
            error_code="CLIENT_INPUT_ERROR",
            details=additional_details,
            **kwargs,
        )


class ServerError(BaseError):
    """Base for server errors (5xx)."""

    def __init__(self, message: str, error_code: str, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=kwargs.pop("category", ErrorCategory.SERVER_ERROR),
            http_status=kwargs.pop("http_status", 500),
            retryable=kwargs.pop("retryable", False),
            **kwargs,
        )


class ExternalServiceError(ServerError):
    """External service failure.

    Args:
        service_name: Name of the external service ("FIGMA", "LLM")
        error_type: Kind of failure ("http_error", "timeout", "unavailable",
            "invalid_response", "error")
        message: Error text returned to the caller
        http_status: Status to return (502 unless the subclass decides)
    """

    def __init__(
        self,
        service_name: str,
        error_type: str,
        message: Optional[str] = None,
        **kwargs,
    ):
        additional_details = kwargs.pop("details", {})
        additional_details.update(
            {
                "service": service_name,
                "error_type": error_type,
            }
        )

        super().__init__(
            message=message or f"{service_name} service {error_type}",
            error_code=f"{service_name.upper()}_{error_type.upper()}",
            category=ErrorCategory.EXTERNAL_SERVICE,
            http_status=kwargs.pop("http_status", 502),
            retryable=True,
            details=additional_details,
            **kwargs,
        )
        self.service_name = service_name
        self.error_type = error_type


class UpstreamFetchError(ExternalServiceError):
    """The Figma document fetch failed or returned an unexpected shape.

    When the upstream answered with an error status, that status is kept
    as `upstream_status` and mirrored as the response status.
    """

    def __init__(
        self,
        error_type: str,
        message: str,
        upstream_status: Optional[int] = None,
        **kwargs,
    ):
        if upstream_status is not None and upstream_status >= 400:
            http_status = upstream_status
        elif error_type == "timeout":
            http_status = 504
        elif error_type == "invalid_response":
            http_status = 500
        else:
            http_status = 502

        additional_details = kwargs.pop("details", {})
        if upstream_status is not None:
            additional_details["upstream_status"] = upstream_status

        super().__init__(
            service_name="FIGMA",
            error_type=error_type,
            message=message,
            http_status=http_status,
            details=additional_details,
            **kwargs,
        )
        self.upstream_status = upstream_status


class UpstreamModelError(ExternalServiceError):
    """The chat-completions call failed outright (always 502)."""

    def __init__(self, error_type: str, message: Optional[str] = None, **kwargs):
        super().__init__(
            service_name="LLM",
            error_type=error_type,
            message=message or "LLM analysis failed, please retry.",
            http_status=502,
            **kwargs,
        )


class ExtractionFailure(ServerError):
    """The model answered but no JSON could be recovered from its text (502).

    The raw text is kept for logging only.
    """

    def __init__(self, raw_text: str, message: Optional[str] = None):
        super().__init__(
            message=message or "Invalid JSON from LLM, please retry.",
            error_code="LLM_INVALID_JSON",
            http_status=502,
            retryable=True,
        )
        self.raw_text = raw_text


class ShapeMismatchError(ServerError):
    """The model's JSON parsed but has the wrong top-level shape (502)."""

    def __init__(self, expected: str, actual: str, value: Any = None):
        super().__init__(
            message="Unexpected response shape from LLM, please retry.",
            error_code="LLM_SHAPE_MISMATCH",
            http_status=502,
            retryable=True,
            details={"expected": expected, "actual": actual},
        )
        self.value = value
