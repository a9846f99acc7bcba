"""Unit tests for top-level shape validation."""

import pytest

from pipeline.models.dto import PromptKind
from pipeline.processors.result_validator import ShapeError, Valid, shape_name, validate_result


class TestFrameSearchShape:
    """Frame search answers must be arrays."""

    def test_array_is_valid(self):
        value = [{"name": "Login", "reason": "has sign-in", "confidence": "High"}]

        assert validate_result(PromptKind.FRAME_SEARCH, value) == Valid(value)

    def test_empty_array_is_valid(self):
        assert validate_result(PromptKind.FRAME_SEARCH, []) == Valid([])

    def test_partial_elements_pass_through(self):
        """Elements missing fields are not rejected."""
        value = [{"name": "Only name"}, {"reason": "no name"}, "stray"]

        result = validate_result(PromptKind.FRAME_SEARCH, value)

        assert isinstance(result, Valid)
        assert result.value is value

    def test_object_is_shape_error(self):
        value = {"results": []}

        result = validate_result(PromptKind.FRAME_SEARCH, value)

        assert result == ShapeError(value=value, expected="array", actual="object")


class TestFlowAnalysisShape:
    """Flow analysis answers must be objects."""

    def test_object_is_valid(self):
        value = {"overview": "...", "steps": []}

        assert validate_result(PromptKind.FLOW_ANALYSIS, value) == Valid(value)

    @pytest.mark.parametrize(
        "value, actual",
        [([], "array"), ("text", "string"), (3, "number"), (None, "null"), (True, "boolean")],
    )
    def test_non_object_is_shape_error(self, value, actual):
        result = validate_result(PromptKind.FLOW_ANALYSIS, value)

        assert isinstance(result, ShapeError)
        assert result.expected == "object"
        assert result.actual == actual
        assert result.value == value


def test_shape_name_float():
    assert shape_name(1.5) == "number"
