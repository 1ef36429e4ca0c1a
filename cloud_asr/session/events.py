"""Events delivered to the session state machine, one at a time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from cloud_asr.state import TimerKind
from cloud_asr.errors import ASRError, ProtocolError
from cloud_asr.protocol import ServerMessage


@dataclass(frozen=True, slots=True)
class Start:
    pass


@dataclass(frozen=True, slots=True)
class TransportOpened:
    pass


@dataclass(frozen=True, slots=True)
class MessageReceived:
    message: ServerMessage


@dataclass(frozen=True, slots=True)
class MalformedMessage:
    error: ProtocolError


@dataclass(frozen=True, slots=True)
class TransportFailed:
    error: ASRError


@dataclass(frozen=True, slots=True)
class TransportClosed:
    code: int
    reason: str = ""
    clean: bool = False


@dataclass(frozen=True, slots=True)
class TimerFired:
    kind: TimerKind
    token: int = 0


@dataclass(frozen=True, slots=True)
class StopRequested:
    pass


@dataclass(frozen=True, slots=True)
class AudioEnded:
    pass


@dataclass(frozen=True, slots=True)
class Retry:
    attempt_count: int
    backoff_ms: int
    delay_ms: int


@dataclass(frozen=True, slots=True)
class GiveUp:
    error: ASRError | None = None


Event: TypeAlias = (
    Start
    | TransportOpened
    | MessageReceived
    | MalformedMessage
    | TransportFailed
    | TransportClosed
    | TimerFired
    | StopRequested
    | AudioEnded
    | Retry
    | GiveUp
)

EVENT_TYPES: tuple[type, ...] = (
    Start,
    TransportOpened,
    MessageReceived,
    MalformedMessage,
    TransportFailed,
    TransportClosed,
    TimerFired,
    StopRequested,
    AudioEnded,
    Retry,
    GiveUp,
)

__all__ = [
    "EVENT_TYPES",
    "AudioEnded",
    "Event",
    "GiveUp",
    "MalformedMessage",
    "MessageReceived",
    "Retry",
    "Start",
    "StopRequested",
    "TimerFired",
    "TransportClosed",
    "TransportFailed",
    "TransportOpened",
]
