"""Bounded-retry, exponential-backoff reconnection policy."""

from __future__ import annotations

import logging

from cloud_asr.state import Session, ErrorKind, RetrySettings
from cloud_asr.errors import ASRError, ConnectionExhausted
from cloud_asr.config.retry import MAX_ATTEMPTS, BACKOFF_MULTIPLIER, INITIAL_BACKOFF_MS

from .decision import Decision

logger = logging.getLogger(__name__)


def backoff_schedule(settings: RetrySettings) -> list[int]:
    """Delays (ms) before each retry, in order."""
    delays: list[int] = []
    delay = settings.initial_backoff_ms
    for _ in range(settings.max_attempts):
        delays.append(delay)
        delay *= settings.backoff_multiplier
    return delays


class ReconnectPolicy:
    """Decides, per failure, whether the session reconnects.

    Order of precedence: a caller stop suppresses everything; a non-retryable
    error surfaces as is and does not consume an attempt; once
    `attempt_count >= max_attempts` the session is exhausted; otherwise the
    attempt counter increments and the current backoff is used as the delay
    before the backoff doubles.
    """

    def __init__(self, settings: RetrySettings | None = None) -> None:
        self.settings = settings or RetrySettings(
            max_attempts=MAX_ATTEMPTS,
            initial_backoff_ms=INITIAL_BACKOFF_MS,
            backoff_multiplier=BACKOFF_MULTIPLIER,
        )

    def new_session(self) -> Session:
        return Session(
            max_attempts=self.settings.max_attempts,
            backoff_ms=self.settings.initial_backoff_ms,
            initial_backoff_ms=self.settings.initial_backoff_ms,
        )

    def decide(self, session: Session, error: ASRError) -> Decision:
        if session.manual_stop:
            return Decision(retry=False, attempt_count=session.attempt_count, backoff_ms=session.backoff_ms)

        if not error.retryable or self._repeated_protocol_error(session, error):
            logger.info("reconnect: not retrying %s error: %s", error.kind.value, error)
            return Decision(
                retry=False,
                attempt_count=session.attempt_count,
                backoff_ms=session.backoff_ms,
                error=error,
            )

        if session.attempt_count >= session.max_attempts:
            logger.warning("reconnect: giving up after %d attempts: %s", session.attempt_count, error)
            exhausted = ConnectionExhausted(
                message=f"gave up after {session.attempt_count} reconnect attempts; last error: {error}",
                attempts=session.attempt_count,
                last_error=error,
            )
            return Decision(
                retry=False,
                attempt_count=session.attempt_count,
                backoff_ms=session.backoff_ms,
                error=exhausted,
            )

        attempt = session.attempt_count + 1
        logger.info(
            "reconnect: attempt %d/%d in %d ms after %s error: %s",
            attempt,
            session.max_attempts,
            session.backoff_ms,
            error.kind.value,
            error,
        )
        return Decision(
            retry=True,
            delay_ms=session.backoff_ms,
            attempt_count=attempt,
            backoff_ms=session.backoff_ms * self.settings.backoff_multiplier,
        )

    @staticmethod
    def _repeated_protocol_error(session: Session, error: ASRError) -> bool:
        # A second malformed reply without a successful handshake in between.
        return error.kind == ErrorKind.PROTOCOL and session.protocol_errors > 1


__all__ = ["ReconnectPolicy", "backoff_schedule"]
