"""Configuration module exports (env-resolved constants only)."""

from .retry import MAX_ATTEMPTS, INITIAL_BACKOFF_MS
from .audio import ASR_SAMPLE_RATE_HZ
from .signing import ASR_HOST, ASR_PATH_PREFIX
from .session import HANDSHAKE_TIMEOUT_S

__all__ = [
    "ASR_HOST",
    "ASR_PATH_PREFIX",
    "ASR_SAMPLE_RATE_HZ",
    "HANDSHAKE_TIMEOUT_S",
    "INITIAL_BACKOFF_MS",
    "MAX_ATTEMPTS",
]
