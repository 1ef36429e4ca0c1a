"""Shared error types for the cloud ASR client.

Every error carries the classification used for retry decisions and for the
single user-facing explanation shown when a session ends in failure.
"""

from __future__ import annotations

from dataclasses import dataclass

from cloud_asr.state.kinds import ErrorKind
from cloud_asr.config.messages import ERROR_MESSAGES, SERVICE_CODE_HINTS


@dataclass(frozen=True, slots=True)
class ASRError(Exception):
    """Base class; never raised directly."""

    message: str

    def __str__(self) -> str:
        return self.message

    @property
    def kind(self) -> ErrorKind:
        raise NotImplementedError

    @property
    def retryable(self) -> bool:
        return False

    @property
    def remediation(self) -> str:
        return ERROR_MESSAGES[self.kind.value]


@dataclass(frozen=True, slots=True)
class ConfigurationError(ASRError):
    """Missing or invalid credentials or recognition parameters."""

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.CONFIGURATION


@dataclass(frozen=True, slots=True)
class AudioPermissionError(ASRError):
    """The audio capture device could not be acquired."""

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.PERMISSION


@dataclass(frozen=True, slots=True)
class TransportError(ASRError):
    """Connection drop, unclean close or timeout."""

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.TRANSPORT

    @property
    def retryable(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class ProtocolError(ASRError):
    """Malformed or unexpected message from the service."""

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.PROTOCOL

    @property
    def retryable(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class ServiceError(ASRError):
    """Non-zero `code` reported by the service."""

    code: int = 0
    fatal: bool = False

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.SERVICE_FATAL if self.fatal else ErrorKind.SERVICE_RECOVERABLE

    @property
    def retryable(self) -> bool:
        return not self.fatal

    @property
    def remediation(self) -> str:
        return SERVICE_CODE_HINTS.get(self.code) or ERROR_MESSAGES[self.kind.value]


@dataclass(frozen=True, slots=True)
class NoSpeechError(ASRError):
    """The session ended without any transcript. Reported as an outcome."""

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.NO_SPEECH


@dataclass(frozen=True, slots=True)
class ConnectionExhausted(ASRError):
    """Retries ran out; `last_error` is the failure that used the final attempt."""

    attempts: int = 0
    last_error: ASRError | None = None

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.CONNECTION_EXHAUSTED


__all__ = [
    "ASRError",
    "AudioPermissionError",
    "ConfigurationError",
    "ConnectionExhausted",
    "NoSpeechError",
    "ProtocolError",
    "ServiceError",
    "TransportError",
]
