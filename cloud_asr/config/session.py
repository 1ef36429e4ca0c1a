"""Streaming session timing (env-resolved constants only)."""

from __future__ import annotations

import os

from ._env import get_int, get_bool, get_float

# Covers both transport establishment and the service's handshake reply.
HANDSHAKE_TIMEOUT_S: float = max(0.1, get_float("ASR_HANDSHAKE_TIMEOUT_S", 10.0))

# How long a streaming session may go without any transcript.
QUERY_SIGN_NO_RESULT_TIMEOUT_S: float = max(0.1, get_float("ASR_NO_RESULT_TIMEOUT_S", 30.0))
TC3_NO_RESULT_TIMEOUT_S: float = max(0.1, get_float("ASR_TC3_NO_RESULT_TIMEOUT_S", 15.0))

# Wait for the service to acknowledge the stop message before closing.
FINAL_GRACE_S: float = max(0.0, get_float("ASR_FINAL_GRACE_S", 1.0))
FINAL_MARKER_GRACE_S: float = max(0.0, get_float("ASR_FINAL_MARKER_GRACE_S", 0.5))
STOP_GRACE_S: float = max(0.0, get_float("ASR_STOP_GRACE_S", 0.5))

# Upper bound on the TCP/TLS/HTTP upgrade alone (the handshake timer also applies).
WS_OPEN_TIMEOUT_S: float = max(0.1, get_float("ASR_WS_OPEN_TIMEOUT_S", 10.0))
WS_MAX_MESSAGE_BYTES: int = max(1024, get_int("ASR_WS_MAX_MESSAGE_BYTES", 1 << 20))

# "implicit" (signed URL only) or "events" (explicit Start/Stop messages).
ASR_HANDSHAKE_MODE: str = (os.getenv("ASR_HANDSHAKE_MODE") or "implicit").strip().lower()
SEND_STOP_ON_FINAL: bool = get_bool("ASR_SEND_STOP_ON_FINAL", True)

WS_CLOSE_NORMAL_CODE: int = 1000
WS_CLOSE_ABNORMAL_CODE: int = 1006

__all__ = [
    "ASR_HANDSHAKE_MODE",
    "FINAL_GRACE_S",
    "FINAL_MARKER_GRACE_S",
    "HANDSHAKE_TIMEOUT_S",
    "QUERY_SIGN_NO_RESULT_TIMEOUT_S",
    "SEND_STOP_ON_FINAL",
    "STOP_GRACE_S",
    "TC3_NO_RESULT_TIMEOUT_S",
    "WS_CLOSE_ABNORMAL_CODE",
    "WS_CLOSE_NORMAL_CODE",
    "WS_MAX_MESSAGE_BYTES",
    "WS_OPEN_TIMEOUT_S",
]
