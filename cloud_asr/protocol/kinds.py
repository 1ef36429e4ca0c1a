"""Kinds of message the recognition service sends."""

from __future__ import annotations

from enum import StrEnum


class MessageKind(StrEnum):
    HANDSHAKE = "handshake"
    RESULT = "result"
    ERROR = "error"


__all__ = ["MessageKind"]
