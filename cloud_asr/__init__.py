"""Streaming speech recognition client for Tencent Cloud real-time ASR."""

from .errors import (
    ASRError,
    ProtocolError,
    ServiceError,
    NoSpeechError,
    TransportError,
    ConfigurationError,
    ConnectionExhausted,
    AudioPermissionError,
)
from .client import RecognitionClient
from .signing import Signer, SignedRequest
from .state import Outcome, ErrorKind, SessionState, SigningScheme, ClientSettings, RecognitionResult
from .runtime import load_settings, configure_logging
from .session import SessionHandle
from .state.credentials import Credentials

__all__ = [
    "ASRError",
    "AudioPermissionError",
    "ClientSettings",
    "ConfigurationError",
    "ConnectionExhausted",
    "Credentials",
    "ErrorKind",
    "NoSpeechError",
    "Outcome",
    "ProtocolError",
    "RecognitionClient",
    "RecognitionResult",
    "ServiceError",
    "SessionHandle",
    "SessionState",
    "SignedRequest",
    "Signer",
    "SigningScheme",
    "TransportError",
    "configure_logging",
    "load_settings",
]
