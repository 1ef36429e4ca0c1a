from .kinds import ErrorKind
from .phase import SessionState
from .result import RecognitionResult
from .scheme import SigningScheme
from .timers import TimerKind
from .outcome import Outcome
from .session import Session
from .handshake import HandshakeMode
from .settings import (
    AudioSettings,
    RetrySettings,
    ClientSettings,
    SessionSettings,
    SigningSettings,
)

__all__ = [
    "AudioSettings",
    "ClientSettings",
    "ErrorKind",
    "HandshakeMode",
    "Outcome",
    "RecognitionResult",
    "RetrySettings",
    "Session",
    "SessionSettings",
    "SessionState",
    "SigningScheme",
    "SigningSettings",
    "TimerKind",
]
