"""
Application settings using Pydantic.

Environment variables (and `.env`) are read when `load_settings()` is
called. The resulting bundle is handed to `create_app()` and from there
into the client constructors; nothing reads the environment elsewhere.
"""

from pydantic import BaseModel, SecretStr
from pydantic_settings import BaseSettings

from pipeline.core.config import (
    FIGMA_REQUEST_TIMEOUT_SECONDS,
    LLM_REQUEST_TIMEOUT_SECONDS,
)


class FigmaSettings(BaseSettings):
    """Figma REST API configuration."""

    FIGMA_TOKEN: SecretStr = SecretStr("")
    FIGMA_API_BASE_URL: str = "https://api.figma.com/v1"
    FIGMA_REQUEST_TIMEOUT_SECONDS: float = FIGMA_REQUEST_TIMEOUT_SECONDS

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class LLMSettings(BaseSettings):
    """Chat-completions API configuration."""

    OPENAI_API_KEY: SecretStr = SecretStr("")
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_REQUEST_TIMEOUT_SECONDS: float = LLM_REQUEST_TIMEOUT_SECONDS

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class AppSettings(BaseSettings):
    """General application settings."""

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    SEARCH_FALLBACK_SENTINEL: bool = False

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class ServiceSettings(BaseModel):
    """All settings the service needs, passed around explicitly."""

    figma: FigmaSettings
    llm: LLMSettings
    app: AppSettings


def load_settings() -> ServiceSettings:
    return ServiceSettings(
        figma=FigmaSettings(),
        llm=LLMSettings(),
        app=AppSettings(),
    )
