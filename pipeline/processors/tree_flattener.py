"""
Flatten a Figma document tree into one record per frame.

The walk is depth-first and pre-order, so records come out in the same
order a designer sees frames in the layers panel. Each frame's text is
every TEXT node underneath it, joined with single spaces.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

from pipeline.core.config import CONTAINER_NODE_TYPE, MAX_TREE_DEPTH, TEXT_NODE_TYPE
from pipeline.models.dto import FrameRecord

logger = logging.getLogger(__name__)

_GEOMETRY_KEYS = ("width", "height", "x", "y")


def _children(node: dict[str, Any]) -> list[dict[str, Any]]:
    children = node.get("children")
    if not isinstance(children, list):
        return []
    return [c for c in children if isinstance(c, dict)]


def _walk(root: dict[str, Any], max_depth: int) -> Iterator[dict[str, Any]]:
    """
    Yield every node of the subtree in pre-order, each at most once.

    Uses an explicit stack so deep trees cannot exhaust the interpreter
    stack; subtrees below `max_depth` are skipped with a warning.
    """
    seen: set[int] = set()
    stack: list[tuple[dict[str, Any], int]] = [(root, 0)]
    truncated = False

    while stack:
        node, depth = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node

        if depth >= max_depth:
            truncated = truncated or bool(_children(node))
            continue
        # Reverse so the first child is popped first
        for child in reversed(_children(node)):
            stack.append((child, depth + 1))

    if truncated:
        logger.warning("Document tree deeper than %d levels was truncated", max_depth)


def _child_count(node: dict[str, Any]) -> int:
    children = node.get("children")
    return len(children) if isinstance(children, list) else 0


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _geometry(node: dict[str, Any]) -> dict[str, Optional[float]]:
    box = node.get("absoluteBoundingBox")
    if not isinstance(box, dict):
        box = {}
    return {
        key: _number(box[key]) if key in box else _number(node.get(key))
        for key in _GEOMETRY_KEYS
    }


def collect_text(
    node: dict[str, Any],
    *,
    text_type: str = TEXT_NODE_TYPE,
    max_depth: int = MAX_TREE_DEPTH,
) -> str:
    """
    Join the characters of every text leaf under `node` with single spaces.

    Text nodes without `characters` (or with an empty string) are skipped.
    Returns "" when no descendant carries text.
    """
    parts = []
    for descendant in _walk(node, max_depth):
        if descendant.get("type") == text_type:
            characters = descendant.get("characters")
            if isinstance(characters, str) and characters:
                parts.append(characters)
    return " ".join(parts)


def flatten(
    root: dict[str, Any],
    *,
    container_type: str = CONTAINER_NODE_TYPE,
    text_type: str = TEXT_NODE_TYPE,
    max_depth: int = MAX_TREE_DEPTH,
) -> list[FrameRecord]:
    """
    Flatten a document tree into frame records.

    Args:
      root: Tree root (usually the `document` node of a Figma file response).
      container_type: Node type that produces a record.
      text_type: Node type whose `characters` are collected as text.
      max_depth: Depth bound for both the outer and the text walks.

    Returns:
      One FrameRecord per container node, in document pre-order.
    """
    if not isinstance(root, dict):
        return []

    records = []
    for node in _walk(root, max_depth):
        if node.get("type") != container_type:
            continue
        name = node.get("name")
        records.append(
            FrameRecord(
                name=name if isinstance(name, str) else "",
                text=collect_text(node, text_type=text_type, max_depth=max_depth),
                node_type=container_type,
                child_count=_child_count(node),
                **_geometry(node),
            )
        )
    return records
