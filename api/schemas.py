"""Pydantic request/response schemas for API endpoints."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pipeline.models.dto import DiagramPayload


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str = Field(..., description="Human-readable error message")

    model_config = ConfigDict(
        json_schema_extra={"example": {"error": "No diagramPayload provided"}}
    )


class SearchRequest(BaseModel):
    """Frame search request sent by the plugin.

    Both fields are optional here so that a missing value is reported as a
    400 with a plain message rather than a schema error.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"query": "checkout with saved card", "fileKey": "AbC123xyz"}
        },
    )

    query: Optional[str] = Field(None, description="Free-text description of the screen")
    file_key: Optional[str] = Field(
        None, alias="fileKey", description="Figma file key from the file URL"
    )


class FlowAnalyzeRequest(BaseModel):
    """Flow analysis request sent by the plugin."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "diagramPayload": {
                    "steps": [
                        {"stepId": "1:2", "label": "Open app"},
                        {"stepId": "1:3", "label": "Choose restaurant"},
                    ],
                    "connectors": [{"from": "1:2", "to": "1:3"}],
                    "freeText": ["Users drop off at sign-up"],
                }
            }
        },
    )

    diagram_payload: Optional[DiagramPayload] = Field(None, alias="diagramPayload")


class StepInsight(BaseModel):
    """Per-step insight as requested from the model (documentation only)."""

    step_id: Optional[str] = Field(None, alias="stepId")
    label: Optional[str] = None
    pain: Optional[str] = None
    suggestion: Optional[str] = None
    severity: Optional[str] = Field(None, description="high, medium or low")


class FlowAnalysis(BaseModel):
    """Flow analysis result as requested from the model (documentation only).

    The actual response is the model's JSON object passed through as-is.
    """

    model_config = ConfigDict(extra="allow")

    context: Optional[str] = None
    goal: Optional[str] = None
    sub_goal: Optional[str] = Field(None, alias="subGoal")
    overview: Optional[str] = None
    steps: List[StepInsight] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Service health status response."""

    status: str = Field(..., description="Overall status (healthy/degraded)")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    figma_configured: bool = Field(..., description="Whether FIGMA_TOKEN is set")
    llm_configured: bool = Field(..., description="Whether OPENAI_API_KEY is set")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "service": "figma-insights-service",
                "version": "1.0.0",
                "figma_configured": True,
                "llm_configured": True,
            }
        }
    )
