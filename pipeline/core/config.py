# =============================================================================
# Document Tree
# =============================================================================

CONTAINER_NODE_TYPE = "FRAME"
TEXT_NODE_TYPE = "TEXT"
MAX_TREE_DEPTH = 256  # Deeper subtrees are not walked


# =============================================================================
# Prompt Limits
# =============================================================================

MAX_FRAMES_IN_PROMPT = 300  # Frames beyond this are not sent to the model
MAX_FRAME_TEXT_CHARS = 600  # Per-frame text is truncated to this length
UNATTACHED_ENDPOINT = "?"  # Shown for a connector end not attached to a step


# =============================================================================
# Model Settings
# =============================================================================

SEARCH_TEMPERATURE = 0.2
SEARCH_MAX_TOKENS = 800

FLOW_TEMPERATURE = 0.2
FLOW_MAX_TOKENS = 1000


# =============================================================================
# External Service Timeouts (seconds)
# =============================================================================

FIGMA_REQUEST_TIMEOUT_SECONDS = 30
LLM_REQUEST_TIMEOUT_SECONDS = 60


# =============================================================================
# Error Handling
# =============================================================================

ERROR_BODY_MAX_CHARS = 200  # Maximum chars from upstream error bodies
RAW_TEXT_LOG_MAX_CHARS = 2000  # Maximum chars of model output written to logs

SENTINEL_FRAME_NAME = "Error"
SENTINEL_CONFIDENCE = "Low"
