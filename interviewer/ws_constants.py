"""WebSocket protocol constants: message types, actions and event builders.

No imports from the rest of the package, so any module can use it
without risk of circular dependencies.
"""

# ── Client -> Server message types ────────────────────────────────────

MSG_SESSION_CONTROL = "session_control"
MSG_TEXT_INPUT = "text_input"
MSG_VOICE_INPUT = "voice_input"
MSG_CODE_INPUT = "code_input"
MSG_STEP_CONTROL = "step_control"

# ── Server -> Client message types ────────────────────────────────────

MSG_AI_RESPONSE = "ai_response"
MSG_ERROR = "error"
# session_control and step_control are also sent server -> client

# ── Actions ───────────────────────────────────────────────────────────

ACTION_START = "start"
ACTION_END = "end"

ACTION_SET_STEP = "set_step"
ACTION_NEXT = "next"
ACTION_PREVIOUS = "previous"

# ── Error kinds (internal only, stripped before sending) ──────────────

ERR_VALIDATION = "validation"
ERR_GENERATION = "generation"
ERR_INTERNAL = "internal"

# ── Fixed messages ────────────────────────────────────────────────────

CONNECTED_MESSAGE = "Connected to interview server"
STARTED_MESSAGE = "Interview started"
COMPLETED_MESSAGE = "Interview completed"
STEP_CHANGED_MESSAGE = "Step changed"
PROCESSING_FAILED_MESSAGE = "Failed to process message"
GENERATION_FAILED_MESSAGE = "Failed to generate AI response"
REVIEW_FAILED_MESSAGE = "Failed to review code"
FRAME_TOO_LARGE_MESSAGE = "Message too large"
BUSY_MESSAGE = "Too many pending messages, please wait for a reply"


def event(msg_type: str, **payload) -> dict:
    return {"type": msg_type, "payload": payload}


def error_event(message: str, kind: str = ERR_INTERNAL) -> dict:
    return {"type": MSG_ERROR, "payload": {"message": message}, "kind": kind}


def wire(evt: dict) -> dict:
    """The on-the-wire form of an event: just ``type`` and ``payload``."""
    return {"type": evt["type"], "payload": evt["payload"]}
