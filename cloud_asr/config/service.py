"""Recognition service response keys and error codes."""

from __future__ import annotations

# Response keys
RESP_KEY_CODE = "code"
RESP_KEY_MESSAGE = "message"
RESP_KEY_VOICE_ID = "voice_id"
RESP_KEY_RESULT = "result"
RESP_KEY_TEXT = "voice_text_str"
RESP_KEY_FINAL = "final"

RESP_CODE_OK = 0

# Service error codes
ERR_INVALID_PARAMS = 4001
ERR_AUTH_FAILED = 4002
ERR_SERVICE_NOT_ENABLED = 4003
ERR_QUOTA_EXHAUSTED = 4004
ERR_ACCOUNT_ARREARS = 4005

# Retrying any of these just burns attempts: they need the operator to act.
FATAL_SERVICE_CODES: frozenset[int] = frozenset(
    {
        ERR_INVALID_PARAMS,
        ERR_AUTH_FAILED,
        ERR_SERVICE_NOT_ENABLED,
        ERR_QUOTA_EXHAUSTED,
        ERR_ACCOUNT_ARREARS,
    }
)

# Control messages
CTRL_KEY_TYPE = "type"
CTRL_KEY_EVENT = "event"
CTRL_TYPE_END = "end"
CTRL_EVENT_START = "Start"
CTRL_EVENT_STOP = "Stop"

__all__ = [
    "CTRL_EVENT_START",
    "CTRL_EVENT_STOP",
    "CTRL_KEY_EVENT",
    "CTRL_KEY_TYPE",
    "CTRL_TYPE_END",
    "ERR_ACCOUNT_ARREARS",
    "ERR_AUTH_FAILED",
    "ERR_INVALID_PARAMS",
    "ERR_QUOTA_EXHAUSTED",
    "ERR_SERVICE_NOT_ENABLED",
    "FATAL_SERVICE_CODES",
    "RESP_CODE_OK",
    "RESP_KEY_CODE",
    "RESP_KEY_FINAL",
    "RESP_KEY_MESSAGE",
    "RESP_KEY_RESULT",
    "RESP_KEY_TEXT",
    "RESP_KEY_VOICE_ID",
]
