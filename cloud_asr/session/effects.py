"""Effects requested by the state machine and carried out by the manager."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from cloud_asr.state import Outcome, TimerKind
from cloud_asr.errors import ASRError
from cloud_asr.config.session import WS_CLOSE_NORMAL_CODE


@dataclass(frozen=True, slots=True)
class OpenTransport:
    """Sign a fresh request and connect."""


@dataclass(frozen=True, slots=True)
class SendControl:
    action: Literal["start", "stop"]


@dataclass(frozen=True, slots=True)
class ArmTimer:
    kind: TimerKind
    seconds: float


@dataclass(frozen=True, slots=True)
class CancelTimer:
    kind: TimerKind


@dataclass(frozen=True, slots=True)
class CancelAllTimers:
    pass


@dataclass(frozen=True, slots=True)
class CloseTransport:
    code: int = WS_CLOSE_NORMAL_CODE


@dataclass(frozen=True, slots=True)
class StartAudio:
    pass


@dataclass(frozen=True, slots=True)
class EmitInterim:
    text: str


@dataclass(frozen=True, slots=True)
class EmitFinal:
    text: str


@dataclass(frozen=True, slots=True)
class EmitError:
    error: ASRError


@dataclass(frozen=True, slots=True)
class EmitClosed:
    outcome: Outcome


@dataclass(frozen=True, slots=True)
class ReleaseAudio:
    pass


@dataclass(frozen=True, slots=True)
class ReportFailure:
    """Hand the error to the reconnection policy."""

    error: ASRError


Effect: TypeAlias = (
    OpenTransport
    | SendControl
    | ArmTimer
    | CancelTimer
    | CancelAllTimers
    | CloseTransport
    | StartAudio
    | EmitInterim
    | EmitFinal
    | EmitError
    | EmitClosed
    | ReleaseAudio
    | ReportFailure
)

__all__ = [
    "ArmTimer",
    "CancelAllTimers",
    "CancelTimer",
    "CloseTransport",
    "Effect",
    "EmitClosed",
    "EmitError",
    "EmitFinal",
    "EmitInterim",
    "OpenTransport",
    "ReleaseAudio",
    "ReportFailure",
    "SendControl",
    "StartAudio",
]
