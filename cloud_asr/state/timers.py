"""Per-session timer identities."""

from __future__ import annotations

from enum import StrEnum


class TimerKind(StrEnum):
    HANDSHAKE = "handshake"
    NO_RESULT = "no_result"
    GRACE = "grace"
    BACKOFF = "backoff"


__all__ = ["TimerKind"]
