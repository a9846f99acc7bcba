"""FastAPI application entry point."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic_core import ValidationError as PydanticCoreValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import flow, health, search
from core.error_handlers import (
    catch_unhandled_errors,
    handle_app_error,
    handle_http_error,
    handle_pydantic_error,
    handle_unknown_error,
    handle_validation_error,
)
from core.lifespan import lifespan
from core.middleware import trace_id_middleware
from core.openapi import custom_openapi
from core.settings import ServiceSettings, load_settings
from core.validation import validate_all_settings
from pipeline.core.exceptions import BaseError
from pipeline.core.logging_config import configure_structured_logging

logger = logging.getLogger(__name__)


def create_app(settings: ServiceSettings | None = None) -> FastAPI:
    """Build the application from explicit settings (loaded from env if omitted)."""
    settings = settings or load_settings()

    configure_structured_logging(
        level=settings.app.LOG_LEVEL, json_format=settings.app.LOG_JSON
    )

    # Fail fast on malformed configuration
    validate_all_settings(settings)

    app = FastAPI(
        title="Figma Frame Insights API",
        version=health.SERVICE_VERSION,
        description="Frame search and user-flow analysis for the Figma plugin",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.openapi = lambda: custom_openapi(app)

    # 1. Register Middleware (last added runs outermost)
    app.middleware("http")(catch_unhandled_errors)
    app.middleware("http")(trace_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Trace-ID", "X-Error-Code"],
    )

    # 2. Register Exception Handlers
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(PydanticCoreValidationError, handle_pydantic_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(BaseError, handle_app_error)
    app.add_exception_handler(Exception, handle_unknown_error)

    # Routes
    app.include_router(health.router)
    app.include_router(search.router)
    app.include_router(flow.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = app.state.settings
    logger.info(f"Listening on port {settings.app.PORT}")
    uvicorn.run(app, host=settings.app.HOST, port=settings.app.PORT, log_config=None)
