"""
Top-level shape check for parsed model answers.

Frame search expects a JSON array and flow analysis a JSON object.
Only the top-level shape is enforced; elements are passed through as
the model produced them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from pipeline.models.dto import PromptKind

_EXPECTED_SHAPE = {
    PromptKind.FRAME_SEARCH: ("array", list),
    PromptKind.FLOW_ANALYSIS: ("object", dict),
}


@dataclass(frozen=True)
class Valid:
    value: Any


@dataclass(frozen=True)
class ShapeError:
    value: Any
    expected: str
    actual: str


ShapeCheck = Union[Valid, ShapeError]


def shape_name(value: Any) -> str:
    """JSON type name of a parsed value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def validate_result(kind: PromptKind, value: Any) -> ShapeCheck:
    expected, expected_type = _EXPECTED_SHAPE[kind]
    if isinstance(value, expected_type):
        return Valid(value)
    return ShapeError(value=value, expected=expected, actual=shape_name(value))
