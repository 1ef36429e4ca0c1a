"""Session state machine.

`step(session, event, profile)` is a pure transition: it copies the session,
applies the rule registered for `(state, type(event))` and returns the new
session with the effects the manager must carry out, in order. Every
non-terminal state has an explicit rule for every event type; terminal states
absorb everything.
"""

from __future__ import annotations

from typing import TypeAlias
from dataclasses import replace
from collections.abc import Callable

from cloud_asr.errors import ASRError, NoSpeechError, TransportError
from cloud_asr.protocol import MessageKind, classify_service_error
from cloud_asr.state import (
    Outcome,
    Session,
    ErrorKind,
    TimerKind,
    SessionState,
    HandshakeMode,
    SessionSettings,
)
from cloud_asr.state.session import new_session_id

from .events import (
    EVENT_TYPES,
    Event,
    Retry,
    Start,
    GiveUp,
    AudioEnded,
    TimerFired,
    StopRequested,
    MessageReceived,
    TransportClosed,
    TransportFailed,
    TransportOpened,
    MalformedMessage,
)
from .effects import (
    Effect,
    ArmTimer,
    EmitError,
    EmitFinal,
    EmitClosed,
    StartAudio,
    CancelTimer,
    EmitInterim,
    SendControl,
    ReleaseAudio,
    OpenTransport,
    ReportFailure,
    CloseTransport,
    CancelAllTimers,
)

Effects: TypeAlias = list[Effect]
Rule: TypeAlias = Callable[[Session, Event, SessionSettings], Effects]

_S = SessionState


def _ignore(s: Session, ev: Event, profile: SessionSettings) -> Effects:
    return []


def _fail(s: Session, error: ASRError) -> Effects:
    """Enter ERRORED; the reconnection policy decides what happens next."""
    s.state = _S.ERRORED
    s.last_error = error
    if error.kind == ErrorKind.PROTOCOL:
        s.protocol_errors += 1
    return [CancelAllTimers(), CloseTransport(), ReportFailure(error)]


def _deliver_final(s: Session, text: str) -> Effects:
    if s.final_delivered or not text:
        return []
    s.accumulated_final_text = text
    s.final_delivered = True
    s.outcome = Outcome.FINAL
    return [EmitFinal(text)]


def _terminate(s: Session, state: SessionState) -> Effects:
    s.state = state
    return [CancelAllTimers(), CloseTransport(), ReleaseAudio(), EmitClosed(s.outcome or Outcome.CANCELLED)]


def _close(s: Session, *_: object) -> Effects:
    effects = _deliver_final(s, s.best_text())
    if not s.final_delivered and not s.manual_stop:
        return _fail(s, NoSpeechError("session ended without any transcript"))
    if s.outcome is None:
        s.outcome = Outcome.CANCELLED
    return effects + _terminate(s, _S.CLOSED)


def _finalize_with(s: Session, text: str, profile: SessionSettings, *, send_stop: bool, grace_s: float) -> Effects:
    s.state = _S.FINALIZING
    effects: Effects = [CancelTimer(TimerKind.NO_RESULT), *_deliver_final(s, text)]
    if send_stop:
        effects.append(SendControl("stop"))
    effects.append(ArmTimer(TimerKind.GRACE, grace_s))
    return effects


def _connect(s: Session, profile: SessionSettings) -> Effects:
    s.state = _S.CONNECTING
    return [OpenTransport(), ArmTimer(TimerKind.HANDSHAKE, profile.handshake_timeout_s)]


def _stop_gracefully(s: Session, ev: Event, profile: SessionSettings) -> Effects:
    s.manual_stop = True
    s.state = _S.FINALIZING
    return [
        CancelTimer(TimerKind.HANDSHAKE),
        CancelTimer(TimerKind.NO_RESULT),
        SendControl("stop"),
        ArmTimer(TimerKind.GRACE, profile.stop_grace_s),
    ]


def _stop_now(s: Session, ev: Event, profile: SessionSettings) -> Effects:
    s.manual_stop = True
    return _close(s)


def _fail_transport(s: Session, ev: TransportFailed, profile: SessionSettings) -> Effects:
    return _fail(s, ev.error)


def _fail_malformed(s: Session, ev: MalformedMessage, profile: SessionSettings) -> Effects:
    return _fail(s, ev.error)


def _closed_before_stream(s: Session, ev: TransportClosed, profile: SessionSettings) -> Effects:
    return _fail(s, TransportError(f"connection closed before handshake (code {ev.code})"))


def _handshake_timeout(s: Session, ev: TimerFired, profile: SessionSettings) -> Effects:
    if ev.kind != TimerKind.HANDSHAKE:
        return []
    return _fail(s, TransportError(f"no handshake within {profile.handshake_timeout_s:g}s"))


def _idle_start(s: Session, ev: Start, profile: SessionSettings) -> Effects:
    return _connect(s, profile)


def _connecting_opened(s: Session, ev: TransportOpened, profile: SessionSettings) -> Effects:
    s.state = _S.HANDSHAKING
    effects: Effects = []
    if profile.handshake == HandshakeMode.EVENTS:
        effects.append(SendControl("start"))
    effects.append(ArmTimer(TimerKind.HANDSHAKE, profile.handshake_timeout_s))
    return effects


def _acknowledge(s: Session, profile: SessionSettings) -> Effects:
    s.state = _S.STREAMING
    s.attempt_count = 0
    s.backoff_ms = s.initial_backoff_ms
    s.protocol_errors = 0
    return [
        CancelTimer(TimerKind.HANDSHAKE),
        ArmTimer(TimerKind.NO_RESULT, profile.no_result_timeout_s),
        StartAudio(),
    ]


def _on_result(s: Session, ev: MessageReceived, profile: SessionSettings) -> Effects:
    msg = ev.message
    if msg.final:
        text = msg.text or s.best_text()
        if not text:
            return _fail(s, NoSpeechError("service finished without any transcript"))
        # A bare final marker means the service already finished; no stop needed.
        grace_s = profile.final_grace_s if msg.text else profile.final_marker_grace_s
        send_stop = bool(msg.text) and profile.send_stop_on_final
        return _finalize_with(s, text, profile, send_stop=send_stop, grace_s=grace_s)
    if not msg.text:
        return []
    s.accumulated_interim_text = msg.text
    return [EmitInterim(msg.text), ArmTimer(TimerKind.NO_RESULT, profile.no_result_timeout_s)]


def _handshaking_message(s: Session, ev: MessageReceived, profile: SessionSettings) -> Effects:
    msg = ev.message
    if msg.kind == MessageKind.ERROR:
        return _fail(s, classify_service_error(msg.code, msg.message))
    effects = _acknowledge(s, profile)
    if msg.kind == MessageKind.RESULT:
        effects += _on_result(s, ev, profile)
    return effects


def _streaming_message(s: Session, ev: MessageReceived, profile: SessionSettings) -> Effects:
    msg = ev.message
    if msg.kind == MessageKind.ERROR:
        return _fail(s, classify_service_error(msg.code, msg.message))
    if msg.kind == MessageKind.HANDSHAKE:
        return []
    return _on_result(s, ev, profile)


def _streaming_closed(s: Session, ev: TransportClosed, profile: SessionSettings) -> Effects:
    if not ev.clean:
        return _fail(s, TransportError(f"connection lost (code {ev.code})"))
    return _close(s)


def _streaming_timer(s: Session, ev: TimerFired, profile: SessionSettings) -> Effects:
    if ev.kind != TimerKind.NO_RESULT:
        return []
    interim = s.accumulated_interim_text.strip()
    if not interim:
        return _fail(s, NoSpeechError(f"no transcript within {profile.no_result_timeout_s:g}s"))
    return _finalize_with(s, interim, profile, send_stop=True, grace_s=profile.final_marker_grace_s)


def _streaming_audio_ended(s: Session, ev: AudioEnded, profile: SessionSettings) -> Effects:
    # Leave the service time to flush results for the audio already sent.
    s.state = _S.FINALIZING
    return [
        CancelTimer(TimerKind.NO_RESULT),
        SendControl("stop"),
        ArmTimer(TimerKind.GRACE, profile.no_result_timeout_s),
    ]


def _finalizing_message(s: Session, ev: MessageReceived, profile: SessionSettings) -> Effects:
    msg = ev.message
    if msg.kind == MessageKind.ERROR:
        if s.final_delivered:
            return _close(s)
        return _fail(s, classify_service_error(msg.code, msg.message))
    if msg.final:
        if msg.text and not s.final_delivered:
            s.accumulated_final_text = msg.text
        return _close(s)
    if msg.text and not s.final_delivered:
        s.accumulated_interim_text = msg.text
        return [EmitInterim(msg.text)]
    return []


def _finalizing_failed(s: Session, ev: TransportFailed | MalformedMessage, profile: SessionSettings) -> Effects:
    # After the final is delivered a failure only ends the session.
    return _close(s) if s.final_delivered else _fail(s, ev.error)


def _finalizing_stop(s: Session, ev: StopRequested, profile: SessionSettings) -> Effects:
    if s.manual_stop:
        return []
    s.manual_stop = True
    return [ArmTimer(TimerKind.GRACE, profile.stop_grace_s)]


def _finalizing_timer(s: Session, ev: TimerFired, profile: SessionSettings) -> Effects:
    return _close(s) if ev.kind == TimerKind.GRACE else []


def _errored_retry(s: Session, ev: Retry, profile: SessionSettings) -> Effects:
    s.attempt_count = ev.attempt_count
    s.backoff_ms = ev.backoff_ms
    return [ArmTimer(TimerKind.BACKOFF, ev.delay_ms / 1000.0)]


def _errored_timer(s: Session, ev: TimerFired, profile: SessionSettings) -> Effects:
    if ev.kind != TimerKind.BACKOFF:
        return []
    s.session_id = new_session_id()
    return _connect(s, profile)


def _errored_give_up(s: Session, ev: GiveUp, profile: SessionSettings) -> Effects:
    if ev.error is None:
        return _close(s)
    s.last_error = ev.error
    s.outcome = Outcome.NO_SPEECH if ev.error.kind == ErrorKind.NO_SPEECH else Outcome.FAILED
    return [EmitError(ev.error), *_terminate(s, _S.FAILED)]


_IGNORE_REST: dict[type, Rule] = dict.fromkeys(EVENT_TYPES, _ignore)

RULES: dict[SessionState, dict[type, Rule]] = {
    _S.IDLE: {**_IGNORE_REST, Start: _idle_start, StopRequested: _stop_now},
    _S.CONNECTING: {
        **_IGNORE_REST,
        TransportOpened: _connecting_opened,
        MalformedMessage: _fail_malformed,
        TransportFailed: _fail_transport,
        TransportClosed: _closed_before_stream,
        TimerFired: _handshake_timeout,
        StopRequested: _stop_now,
    },
    _S.HANDSHAKING: {
        **_IGNORE_REST,
        MessageReceived: _handshaking_message,
        MalformedMessage: _fail_malformed,
        TransportFailed: _fail_transport,
        TransportClosed: _closed_before_stream,
        TimerFired: _handshake_timeout,
        StopRequested: _stop_gracefully,
    },
    _S.STREAMING: {
        **_IGNORE_REST,
        MessageReceived: _streaming_message,
        MalformedMessage: _fail_malformed,
        TransportFailed: _fail_transport,
        TransportClosed: _streaming_closed,
        TimerFired: _streaming_timer,
        StopRequested: _stop_gracefully,
        AudioEnded: _streaming_audio_ended,
    },
    _S.FINALIZING: {
        **_IGNORE_REST,
        MessageReceived: _finalizing_message,
        MalformedMessage: _finalizing_failed,
        TransportFailed: _finalizing_failed,
        TransportClosed: _close,
        TimerFired: _finalizing_timer,
        StopRequested: _finalizing_stop,
    },
    _S.ERRORED: {
        **_IGNORE_REST,
        TimerFired: _errored_timer,
        StopRequested: _stop_now,
        Retry: _errored_retry,
        GiveUp: _errored_give_up,
    },
}


def step(
    session: Session,
    event: Event,
    profile: SessionSettings,
    *,
    now: float = 0.0,
) -> tuple[Session, Effects]:
    s = replace(session)
    if s.state.is_terminal:
        return s, []
    rule = RULES[s.state][type(event)]
    if isinstance(event, Start):
        s.started_at = now
    if isinstance(event, (Start, MessageReceived)):
        s.last_activity_at = now
    return s, list(rule(s, event, profile))


__all__ = ["RULES", "step"]
