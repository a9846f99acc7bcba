"""Structured logging configuration.

Logs are emitted as one JSON object per line so request telemetry
(counts, timings, token usage) can be filtered by field in any log
aggregator. A plain-text format is available for local development.
"""

import json
import logging
from datetime import datetime, timezone

# Fields copied from logger.info(..., extra={...}) into the JSON record
EXTRA_FIELDS = (
    "trace_id",
    "endpoint",
    "service",
    "error_code",
    "error_type",
    "http_status",
    "upstream_status",
    "duration_ms",
    "timings_ms",
    "total_tokens",
    "model",
    "file_key",
    "frames",
    "steps",
    "connectors",
    "free_text",
    "results",
    "path",
    "raw_text",
)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Example:
        >>> logger.info("flow analysed", extra={"steps": 5, "trace_id": "abc"})
        # Output: {"timestamp": "2026-10-19T08:00:00.000000Z", "level": "INFO",
        #          "message": "flow analysed", "steps": 5, "trace_id": "abc"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .replace(tzinfo=None)
            .isoformat()
            + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


def configure_structured_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure root logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatter (True) or plain text (False)
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler()

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
