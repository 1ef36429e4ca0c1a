"""How a recognition session ended."""

from __future__ import annotations

from enum import StrEnum


class Outcome(StrEnum):
    FINAL = "final"
    NO_SPEECH = "no_speech"
    CANCELLED = "cancelled"
    FAILED = "failed"


__all__ = ["Outcome"]
