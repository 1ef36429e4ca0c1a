"""Reconnection policy for streaming sessions."""

from .policy import ReconnectPolicy, backoff_schedule
from .decision import Decision

__all__ = ["Decision", "ReconnectPolicy", "backoff_schedule"]
