"""
Recover a JSON payload from free-text model output.

Models are asked to answer strictly in JSON but routinely wrap the
answer in markdown fences or surround it with prose. `extract` tries a
short list of candidate substrings and returns the first one that parses;
it never raises, so callers branch on the result type instead.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Union

_WHOLE_FENCE_RE = re.compile(r"^\s*```(?:json)?[ \t]*\n?(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)
_FIRST_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


@dataclass(frozen=True)
class Parsed:
    value: Any


@dataclass(frozen=True)
class Failed:
    raw_text: str
    reason: str = ""


ExtractionResult = Union[Parsed, Failed]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def _outer_span(text: str) -> str:
    """Text from the first opening bracket to the last closing bracket."""
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    ends = [i for i in (text.rfind("}"), text.rfind("]")) if i != -1]
    if not starts or not ends:
        return ""
    start, end = min(starts), max(ends)
    return text[start : end + 1] if end > start else ""


def _candidates(raw: str) -> list[str]:
    found = []

    whole = _WHOLE_FENCE_RE.match(raw)
    if whole:
        found.append(whole.group(1).strip())

    first = _FIRST_FENCE_RE.search(raw)
    if first and first.group(1):
        found.append(first.group(1).strip())

    unfenced = raw.replace("`", "").strip()
    found.append(unfenced)
    found.append(_outer_span(unfenced))

    unique = []
    for candidate in found:
        if candidate and candidate not in unique:
            unique.append(candidate)
    return unique


def strip_fences(raw: str) -> str:
    """
    Return the inside of the first fenced block, or the text without
    backticks when there is no fence.
    """
    first = _FIRST_FENCE_RE.search(raw or "")
    if first and first.group(1):
        return first.group(1).strip()
    return (raw or "").replace("`", "").strip()


def extract(raw_text: str) -> ExtractionResult:
    """
    Parse the JSON payload embedded in a model answer.

    Args:
      raw_text: Model output; None is treated as an empty answer.

    Returns:
      Parsed(value) for the first candidate that is valid JSON, otherwise
      Failed carrying the original, un-stripped text.
    """
    raw = raw_text if isinstance(raw_text, str) else ""
    last_error = "empty response"

    for candidate in _candidates(raw):
        try:
            return Parsed(_loads(candidate))
        except (ValueError, RecursionError) as e:
            last_error = str(e)[:200] or type(e).__name__

    return Failed(raw_text=raw, reason=last_error)
