"""Outcome of one reconnection decision."""

from __future__ import annotations

from dataclasses import dataclass

from cloud_asr.errors import ASRError


@dataclass(frozen=True, slots=True)
class Decision:
    """`retry=True` carries the counters to apply and the delay before reconnecting.

    `retry=False` with `error=None` means the caller stopped the session and
    nothing is surfaced.
    """

    retry: bool
    delay_ms: int = 0
    attempt_count: int = 0
    backoff_ms: int = 0
    error: ASRError | None = None


__all__ = ["Decision"]
