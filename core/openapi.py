from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

ERROR_SCHEMA_REF = "#/components/schemas/ErrorResponse"


def _error_content() -> dict:
    return {"application/json": {"schema": {"$ref": ERROR_SCHEMA_REF}}}


def custom_openapi(app: FastAPI) -> dict:
    """Build the OpenAPI schema with validation failures documented as 400.

    FastAPI adds a 422 HTTPValidationError response to every route with a
    body. The error handlers answer those cases with 400 `{"error": ...}`,
    so each 422 entry is folded into the route's 400 response instead.
    """
    if app.openapi_schema:
        return app.openapi_schema

    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    for operations in schema.get("paths", {}).values():
        for operation in operations.values():
            responses = operation.get("responses", {})
            if responses.pop("422", None) is None:
                continue
            responses.setdefault(
                "400",
                {"description": "Invalid request", "content": _error_content()},
            )

    components = schema.setdefault("components", {}).setdefault("schemas", {})
    for name in ("HTTPValidationError", "ValidationError"):
        components.pop(name, None)

    app.openapi_schema = schema
    return schema
