"""Reconnection policy settings (env-resolved constants only)."""

from __future__ import annotations

from ._env import get_int

MAX_ATTEMPTS: int = max(0, get_int("ASR_MAX_ATTEMPTS", 3))
INITIAL_BACKOFF_MS: int = max(1, get_int("ASR_INITIAL_BACKOFF_MS", 1000))
BACKOFF_MULTIPLIER: int = 2

__all__ = ["BACKOFF_MULTIPLIER", "INITIAL_BACKOFF_MS", "MAX_ATTEMPTS"]
