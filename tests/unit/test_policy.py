from __future__ import annotations

from dataclasses import replace

from cloud_asr.state import Session, RetrySettings
from cloud_asr.retry import ReconnectPolicy, backoff_schedule
from cloud_asr.errors import (
    ProtocolError,
    NoSpeechError,
    TransportError,
    ConfigurationError,
    ConnectionExhausted,
)
from cloud_asr.protocol import classify_service_error

SETTINGS = RetrySettings(max_attempts=3, initial_backoff_ms=1000, backoff_multiplier=2)


def _drive(policy: ReconnectPolicy, session: Session, error: Exception, times: int) -> tuple[Session, list]:
    decisions = []
    for _ in range(times):
        decision = policy.decide(session, error)
        decisions.append(decision)
        if not decision.retry:
            break
        session = replace(session, attempt_count=decision.attempt_count, backoff_ms=decision.backoff_ms)
    return session, decisions


def test_backoff_schedule_doubles() -> None:
    assert backoff_schedule(SETTINGS) == [1000, 2000, 4000]


def test_transient_failures_back_off_then_exhaust() -> None:
    policy = ReconnectPolicy(SETTINGS)
    _, decisions = _drive(policy, policy.new_session(), TransportError("drop"), 10)

    assert [d.delay_ms for d in decisions if d.retry] == [1000, 2000, 4000]
    assert [d.attempt_count for d in decisions if d.retry] == [1, 2, 3]
    last = decisions[-1]
    assert not last.retry
    assert isinstance(last.error, ConnectionExhausted)
    assert last.error.attempts == 3
    assert isinstance(last.error.last_error, TransportError)


def test_fatal_service_error_does_not_consume_an_attempt() -> None:
    policy = ReconnectPolicy(SETTINGS)
    session = policy.new_session()
    decision = policy.decide(session, classify_service_error(4002, "auth"))
    assert not decision.retry
    assert decision.attempt_count == 0
    assert decision.error is not None and decision.error.code == 4002


def test_recoverable_service_error_retries() -> None:
    policy = ReconnectPolicy(SETTINGS)
    decision = policy.decide(policy.new_session(), classify_service_error(4008, "busy"))
    assert decision.retry
    assert decision.delay_ms == 1000


def test_manual_stop_suppresses_retry_and_error() -> None:
    policy = ReconnectPolicy(SETTINGS)
    session = replace(policy.new_session(), manual_stop=True)
    decision = policy.decide(session, TransportError("drop"))
    assert not decision.retry
    assert decision.error is None


def test_non_retryable_errors_surface_as_is() -> None:
    policy = ReconnectPolicy(SETTINGS)
    for error in (ConfigurationError("bad"), NoSpeechError("silence")):
        decision = policy.decide(policy.new_session(), error)
        assert not decision.retry
        assert decision.error is error


def test_repeated_protocol_error_is_not_retried() -> None:
    policy = ReconnectPolicy(SETTINGS)
    session = policy.new_session()
    assert policy.decide(replace(session, protocol_errors=1), ProtocolError("bad json")).retry
    decision = policy.decide(replace(session, protocol_errors=2), ProtocolError("bad json"))
    assert not decision.retry
    assert isinstance(decision.error, ProtocolError)


def test_new_session_uses_settings() -> None:
    session = ReconnectPolicy(RetrySettings(max_attempts=5, initial_backoff_ms=250)).new_session()
    assert session.max_attempts == 5
    assert session.backoff_ms == 250
    assert session.attempt_count == 0
