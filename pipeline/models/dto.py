"""
Typed contracts shared across the pipeline.

Wire-facing models keep the plugin's camelCase keys as aliases so they
round-trip through JSON unchanged, while Python code uses snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FrameRecord(BaseModel):
    """
    One container node of a document tree, flattened.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = ""
    text: str = ""
    width: Optional[float] = None
    height: Optional[float] = None
    x: Optional[float] = None
    y: Optional[float] = None
    node_type: str = Field(default="", alias="nodeType")
    child_count: int = Field(default=0, alias="childCount")


class PromptKind(str, Enum):
    """Which endpoint a prompt, parse or validation step belongs to."""

    FRAME_SEARCH = "frame_search"
    FLOW_ANALYSIS = "flow_analysis"


def _id_to_str(value: Any) -> Any:
    # Plugin node ids arrive as strings, numeric ids are accepted too
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class DiagramStep(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    step_id: Optional[str] = Field(default=None, alias="stepId")
    label: str = ""
    goal_blurb: Optional[str] = Field(default=None, alias="goalBlurb")

    @field_validator("step_id", mode="before")
    @classmethod
    def coerce_step_id(cls, value: Any) -> Any:
        return _id_to_str(value)

    @field_validator("label", mode="before")
    @classmethod
    def null_label_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class DiagramConnector(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Either end may be unattached on the canvas
    source: Optional[str] = Field(default=None, alias="from")
    target: Optional[str] = Field(default=None, alias="to")

    @field_validator("source", "target", mode="before")
    @classmethod
    def coerce_endpoint(cls, value: Any) -> Any:
        return _id_to_str(value)


class DiagramPayload(BaseModel):
    """
    Steps, connectors and loose text collected from a flow diagram.

    All three fields are required arrays; the plugin always sends them,
    possibly empty.
    """

    model_config = ConfigDict(populate_by_name=True)

    steps: list[DiagramStep]
    connectors: list[DiagramConnector]
    free_text: list[str] = Field(..., alias="freeText")


@dataclass(frozen=True)
class ChatCompletion:
    """
    Raw answer of the chat-completions API.
    """

    content: str
    total_tokens: Optional[int] = None
    model: Optional[str] = None


@dataclass(frozen=True)
class Prompt:
    instruction: str
    content: str


def dump_wire(model: BaseModel) -> dict[str, Any]:
    """Serialize a model with its camelCase wire keys."""
    return model.model_dump(by_alias=True)
