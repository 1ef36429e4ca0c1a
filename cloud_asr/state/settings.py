"""Client settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass

from .scheme import SigningScheme
from .handshake import HandshakeMode


@dataclass(frozen=True, slots=True)
class SigningSettings:
    scheme: SigningScheme
    host: str
    path_prefix: str


@dataclass(frozen=True, slots=True)
class SessionSettings:
    """Timing and handshake profile for one signing scheme."""

    handshake: HandshakeMode
    handshake_timeout_s: float
    no_result_timeout_s: float
    final_grace_s: float
    final_marker_grace_s: float
    stop_grace_s: float
    send_stop_on_final: bool = True
    open_timeout_s: float = 10.0
    max_message_bytes: int = 1 << 20


@dataclass(frozen=True, slots=True)
class RetrySettings:
    max_attempts: int
    initial_backoff_ms: int
    backoff_multiplier: int = 2


@dataclass(frozen=True, slots=True)
class AudioSettings:
    sample_rate_hz: int
    channels: int
    block_samples: int
    queue_max: int


@dataclass(frozen=True, slots=True)
class ClientSettings:
    signing: SigningSettings
    session: SessionSettings
    retry: RetrySettings
    audio: AudioSettings


__all__ = [
    "AudioSettings",
    "ClientSettings",
    "RetrySettings",
    "SessionSettings",
    "SigningSettings",
]
