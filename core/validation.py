"""Application startup validation checks.

URL settings must be well formed or the service refuses to start.
Missing API credentials are only reported, so the health endpoint and
client-error paths keep working while a deployment is being configured.
"""

import logging
import re

from core.logging_utils import mask_secret
from core.settings import ServiceSettings

logger = logging.getLogger(__name__)

_URL_PATTERN = re.compile(r"^https?://.+")


def validate_all_settings(settings: ServiceSettings) -> None:
    """Validate settings at application startup.

    Raises:
        RuntimeError: If a URL setting is malformed or the port is out of range
    """
    url_checks = [
        (settings.figma.FIGMA_API_BASE_URL, "FIGMA_API_BASE_URL"),
        (settings.llm.OPENAI_BASE_URL, "OPENAI_BASE_URL"),
    ]

    invalid_urls = []
    for url, name in url_checks:
        if not url or not _URL_PATTERN.match(url):
            invalid_urls.append(
                f"  - {name}={url} (must start with http:// or https://)"
            )

    if invalid_urls:
        error_msg = "Invalid URL formats:\n" + "\n".join(invalid_urls)
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    if not (1 <= settings.app.PORT <= 65535):
        raise RuntimeError(f"PORT must be 1-65535, got {settings.app.PORT}")

    figma_token = settings.figma.FIGMA_TOKEN.get_secret_value()
    openai_key = settings.llm.OPENAI_API_KEY.get_secret_value()

    logger.info(f"  - Figma token: {mask_secret(figma_token)}")
    logger.info(f"  - OpenAI key: {mask_secret(openai_key)}")
    logger.info(f"  - LLM: {settings.llm.OPENAI_BASE_URL} ({settings.llm.LLM_MODEL})")

    if not figma_token:
        logger.warning("FIGMA_TOKEN is not set; /search will fail upstream")
    if not openai_key:
        logger.warning("OPENAI_API_KEY is not set; model calls will fail upstream")
