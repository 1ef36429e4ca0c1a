"""Error classifications surfaced to callers."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    CONFIGURATION = "configuration"
    PERMISSION = "permission"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    SERVICE_FATAL = "service_fatal"
    SERVICE_RECOVERABLE = "service_recoverable"
    NO_SPEECH = "no_speech"
    CONNECTION_EXHAUSTED = "connection_exhausted"


__all__ = ["ErrorKind"]
