"""
Instruction templates for the two model-backed endpoints.

Each prompt is a fixed system instruction plus a user message that embeds
the request data and a literal JSON schema skeleton. Asking for strict
JSON is advisory only; answers still go through the response extractor.
"""

from __future__ import annotations

import json
from typing import Optional, Sequence, Union

from pipeline.core.config import (
    MAX_FRAME_TEXT_CHARS,
    MAX_FRAMES_IN_PROMPT,
    UNATTACHED_ENDPOINT,
)
from pipeline.models.dto import (
    DiagramPayload,
    FrameRecord,
    Prompt,
    PromptKind,
    dump_wire,
)

FRAME_SEARCH_INSTRUCTION = " ".join(
    [
        "You are an assistant that helps product designers find screens in a Figma file.",
        "You receive a search query and a JSON list of frames, each with its name,",
        "the text it contains, its size, position and number of direct children.",
        "Pick the frames that best match the query, most relevant first.",
        "Respond strictly as JSON: a single array, no markdown, no commentary.",
    ]
)

FRAME_SEARCH_TEMPLATE = """Search query:
{query}

Frames:
{frames}

Return the matching frames, most relevant first. Use only frame names that
appear in the list above. "confidence" must be one of "High", "Medium", "Low".
Return an empty array when nothing matches.

OUTPUT strictly as JSON following this schema:
[
  {{ "name": "...", "reason": "...", "confidence": "High" }}
]"""

FLOW_ANALYSIS_INSTRUCTION = " ".join(
    [
        "You are a senior UX researcher analyzing user-journey diagrams.",
        "You receive a set of labeled steps and directed edges (connectors).",
        "Examine each step's label to find domain clues (e.g. 'food delivery', 'cab booking', 'meeting').",
        "From those labels, extract the domain context, the user's primary goal, and a related sub-goal.",
        "Optionally list an expansive set of domain keywords you spotted (synonyms included).",
        "Then focus on user motivations and emotional arcs when making suggestions.",
        "Respond strictly as JSON, with no markdown and no commentary.",
    ]
)

FLOW_ANALYSIS_TEMPLATE = """Step labels:
{labels}

Connectors:
{connectors}

Free-text notes:
{notes}

Full diagram payload:
{payload}

Now, based on those labels:

TASK 1: Extract:
  - "context" (e.g. "Food-delivery app onboarding")
  - "goal" (primary user objective, quote the label that inspired it)
  - "subGoal" (secondary benefit or intent)
  - "extractedKeywords" (an expansive list of domain words)

TASK 2: Provide a 2-3 sentence "overview" that weaves together context, goal, and emotional arc.

TASK 3: For each step, identify:
  - A "pain" point in the user's motivation.
  - One "suggestion" grounded in a relevant Growth.Design principle.
  - The "principle" name and a one-line blurb.
  - A "severity": one of "high", "medium", "low".
  - The original "stepId" and "label" for clarity.

TASK 4: List "keyTakeaways" for the overall flow.

OUTPUT strictly as JSON following this schema:
{{
  "context": "...",
  "goal": "...",
  "subGoal": "...",
  "extractedKeywords": ["..."],
  "overview": "...",
  "steps": [
    {{
      "stepId": "...",
      "label": "...",
      "pain": "...",
      "suggestion": "...",
      "principle": {{ "name": "...", "blurb": "..." }},
      "severity": "high"
    }}
  ],
  "keyTakeaways": [
    {{ "message": "...", "severity": "medium" }}
  ]
}}"""


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def serialize_frames(records: Sequence[FrameRecord]) -> str:
    """JSON list of frames as sent to the model, bounded in size."""
    frames = []
    for record in list(records)[:MAX_FRAMES_IN_PROMPT]:
        frame = dump_wire(record)
        frame["text"] = _truncate(frame["text"], MAX_FRAME_TEXT_CHARS)
        frames.append(frame)
    return json.dumps(frames, ensure_ascii=False)


def render_step_labels(payload: DiagramPayload) -> str:
    if not payload.steps:
        return "(no steps)"
    return "\n".join(f"{i + 1}. {step.label}" for i, step in enumerate(payload.steps))


def render_connectors(payload: DiagramPayload) -> str:
    """Edges as `source -> target`, using step labels where ids resolve.

    An unattached end is shown as `?`.
    """
    if not payload.connectors:
        return "(no connectors)"
    labels = {s.step_id: s.label for s in payload.steps if s.step_id is not None}

    def endpoint(node_id: Optional[str]) -> str:
        if node_id is None:
            return UNATTACHED_ENDPOINT
        return labels.get(node_id) or node_id

    return "\n".join(
        f"- {endpoint(c.source)} -> {endpoint(c.target)}" for c in payload.connectors
    )


def render_notes(payload: DiagramPayload) -> str:
    if not payload.free_text:
        return "(none)"
    return "\n".join(f"- {note}" for note in payload.free_text)


def build_frame_search_prompt(query: str, records: Sequence[FrameRecord]) -> Prompt:
    return Prompt(
        instruction=FRAME_SEARCH_INSTRUCTION,
        content=FRAME_SEARCH_TEMPLATE.format(
            query=query.strip(),
            frames=serialize_frames(records),
        ),
    )


def build_flow_analysis_prompt(payload: DiagramPayload) -> Prompt:
    return Prompt(
        instruction=FLOW_ANALYSIS_INSTRUCTION,
        content=FLOW_ANALYSIS_TEMPLATE.format(
            labels=render_step_labels(payload),
            connectors=render_connectors(payload),
            notes=render_notes(payload),
            payload=json.dumps(dump_wire(payload), ensure_ascii=False),
        ),
    )


def build_prompt(
    kind: PromptKind,
    data: Union[Sequence[FrameRecord], DiagramPayload],
    query: Optional[str] = None,
) -> Prompt:
    """
    Build the instruction/content pair for a model call.

    Args:
      kind: Endpoint the prompt is for.
      data: Frame records (FRAME_SEARCH) or a diagram payload (FLOW_ANALYSIS).
      query: User search text, required for FRAME_SEARCH.

    Raises:
      ValueError: If the data does not fit the prompt kind.
    """
    if kind is PromptKind.FRAME_SEARCH:
        if not query or not query.strip():
            raise ValueError("Frame search prompt requires a query")
        if isinstance(data, DiagramPayload):
            raise ValueError("Frame search prompt requires frame records")
        return build_frame_search_prompt(query, data)

    if not isinstance(data, DiagramPayload):
        raise ValueError("Flow analysis prompt requires a diagram payload")
    return build_flow_analysis_prompt(data)
