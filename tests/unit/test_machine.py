from __future__ import annotations

from dataclasses import replace

import pytest

from cloud_asr.session import RULES, step
from cloud_asr.protocol import MessageKind, ServerMessage
from cloud_asr.errors import NoSpeechError, TransportError, ConnectionExhausted
from cloud_asr.state import Outcome, Session, ErrorKind, TimerKind, SessionState, HandshakeMode, SessionSettings
from cloud_asr.session.events import (
    EVENT_TYPES,
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
)
from cloud_asr.session.effects import (
    ArmTimer,
    EmitError,
    EmitFinal,
    EmitClosed,
    StartAudio,
    EmitInterim,
    SendControl,
    ReleaseAudio,
    OpenTransport,
    ReportFailure,
)

NON_TERMINAL = [s for s in SessionState if not s.is_terminal]


def _result(text: str = "", *, final: bool = False) -> MessageReceived:
    return MessageReceived(ServerMessage(kind=MessageKind.RESULT, text=text, final=final))


def _ack() -> MessageReceived:
    return MessageReceived(ServerMessage(kind=MessageKind.HANDSHAKE, voice_id="v1"))


def _types(effects: list) -> list[type]:
    return [type(effect) for effect in effects]


@pytest.mark.parametrize("state", NON_TERMINAL)
def test_every_event_has_an_explicit_rule(state: SessionState) -> None:
    assert set(RULES[state]) == set(EVENT_TYPES)


@pytest.mark.parametrize("state", [SessionState.CLOSED, SessionState.FAILED])
@pytest.mark.parametrize("event", [Start(), StopRequested(), _ack(), TimerFired(TimerKind.GRACE)])
def test_terminal_states_absorb_events(state: SessionState, event: object) -> None:
    session, effects = step(Session(state=state), event, _profile())
    assert session.state == state
    assert effects == []


def _profile(handshake: HandshakeMode = HandshakeMode.IMPLICIT) -> SessionSettings:
    return SessionSettings(
        handshake=handshake,
        handshake_timeout_s=10.0,
        no_result_timeout_s=30.0,
        final_grace_s=1.0,
        final_marker_grace_s=0.5,
        stop_grace_s=0.5,
    )


def test_step_does_not_mutate_its_input() -> None:
    original = Session()
    session, _ = step(original, Start(), _profile(), now=5.0)
    assert original.state == SessionState.IDLE
    assert session.state == SessionState.CONNECTING
    assert session.started_at == 5.0


def test_start_opens_transport_and_arms_handshake() -> None:
    session, effects = step(Session(), Start(), _profile())
    assert session.state == SessionState.CONNECTING
    assert effects == [OpenTransport(), ArmTimer(TimerKind.HANDSHAKE, 10.0)]


@pytest.mark.parametrize(
    ("mode", "sends_start"),
    [(HandshakeMode.IMPLICIT, False), (HandshakeMode.EVENTS, True)],
)
def test_transport_opened_waits_for_ack(mode: HandshakeMode, sends_start: bool) -> None:
    session, effects = step(Session(state=SessionState.CONNECTING), TransportOpened(), _profile(mode))
    assert session.state == SessionState.HANDSHAKING
    assert (SendControl("start") in effects) is sends_start


def test_ack_starts_streaming_and_resets_counters() -> None:
    start = Session(state=SessionState.HANDSHAKING, attempt_count=2, backoff_ms=4000, protocol_errors=1)
    session, effects = step(start, _ack(), _profile())
    assert session.state == SessionState.STREAMING
    assert session.attempt_count == 0
    assert session.backoff_ms == session.initial_backoff_ms
    assert session.protocol_errors == 0
    assert StartAudio() in effects
    assert ArmTimer(TimerKind.NO_RESULT, 30.0) in effects


def test_handshake_error_is_classified() -> None:
    event = MessageReceived(ServerMessage(kind=MessageKind.ERROR, code=4002, message="bad signature"))
    session, effects = step(Session(state=SessionState.HANDSHAKING), event, _profile())
    assert session.state == SessionState.ERRORED
    assert session.last_error is not None
    assert session.last_error.kind == ErrorKind.SERVICE_FATAL
    assert isinstance(effects[-1], ReportFailure)


def test_handshake_timeout_fails_connecting() -> None:
    session, effects = step(Session(state=SessionState.CONNECTING), TimerFired(TimerKind.HANDSHAKE), _profile())
    assert session.state == SessionState.ERRORED
    assert isinstance(session.last_error, TransportError)


def test_interim_is_emitted_and_rearms_no_result() -> None:
    session, effects = step(Session(state=SessionState.STREAMING), _result("hel"), _profile())
    assert session.state == SessionState.STREAMING
    assert session.accumulated_interim_text == "hel"
    assert effects == [EmitInterim("hel"), ArmTimer(TimerKind.NO_RESULT, 30.0)]


def test_empty_interim_is_ignored() -> None:
    _, effects = step(Session(state=SessionState.STREAMING), _result(""), _profile())
    assert effects == []


def test_final_result_finalizes_once() -> None:
    session, effects = step(Session(state=SessionState.STREAMING), _result("hello", final=True), _profile())
    assert session.state == SessionState.FINALIZING
    assert session.final_delivered
    assert EmitFinal("hello") in effects
    assert SendControl("stop") in effects
    assert ArmTimer(TimerKind.GRACE, 1.0) in effects

    session, effects = step(session, _result("hello again", final=True), _profile())
    assert session.state == SessionState.CLOSED
    assert session.outcome == Outcome.FINAL
    assert EmitFinal("hello again") not in effects
    assert effects[-1] == EmitClosed(Outcome.FINAL)


def test_final_marker_promotes_interim_text() -> None:
    start = Session(state=SessionState.STREAMING, accumulated_interim_text="partial words")
    session, effects = step(start, _result("", final=True), _profile())
    assert session.state == SessionState.FINALIZING
    assert EmitFinal("partial words") in effects
    assert SendControl("stop") not in effects
    assert ArmTimer(TimerKind.GRACE, 0.5) in effects


def test_final_marker_without_text_is_no_speech() -> None:
    session, effects = step(Session(state=SessionState.STREAMING), _result("", final=True), _profile())
    assert session.state == SessionState.ERRORED
    assert isinstance(session.last_error, NoSpeechError)
    assert not any(isinstance(effect, EmitFinal) for effect in effects)


def test_no_result_timeout_promotes_interim() -> None:
    start = Session(state=SessionState.STREAMING, accumulated_interim_text="so far")
    session, effects = step(start, TimerFired(TimerKind.NO_RESULT), _profile())
    assert session.state == SessionState.FINALIZING
    assert EmitFinal("so far") in effects


def test_no_result_timeout_without_text_is_no_speech() -> None:
    session, _ = step(Session(state=SessionState.STREAMING), TimerFired(TimerKind.NO_RESULT), _profile())
    assert session.state == SessionState.ERRORED
    assert session.last_error is not None
    assert session.last_error.kind == ErrorKind.NO_SPEECH


def test_unclean_close_while_streaming_fails() -> None:
    session, effects = step(Session(state=SessionState.STREAMING), TransportClosed(code=1006), _profile())
    assert session.state == SessionState.ERRORED
    assert isinstance(session.last_error, TransportError)
    assert isinstance(effects[-1], ReportFailure)


def test_clean_close_while_streaming_delivers_best_text() -> None:
    start = Session(state=SessionState.STREAMING, accumulated_interim_text="bye")
    session, effects = step(start, TransportClosed(code=1000, clean=True), _profile())
    assert session.state == SessionState.CLOSED
    assert EmitFinal("bye") in effects
    assert ReleaseAudio() in effects


def test_audio_end_finalizes_gracefully() -> None:
    session, effects = step(Session(state=SessionState.STREAMING), AudioEnded(), _profile())
    assert session.state == SessionState.FINALIZING
    assert SendControl("stop") in effects


def test_stop_while_streaming_sends_stop() -> None:
    session, effects = step(Session(state=SessionState.STREAMING), StopRequested(), _profile())
    assert session.state == SessionState.FINALIZING
    assert session.manual_stop
    assert SendControl("stop") in effects
    assert ArmTimer(TimerKind.GRACE, 0.5) in effects


def test_stop_before_connecting_cancels() -> None:
    session, effects = step(Session(), StopRequested(), _profile())
    assert session.state == SessionState.CLOSED
    assert session.outcome == Outcome.CANCELLED
    assert effects[-1] == EmitClosed(Outcome.CANCELLED)
    assert not any(isinstance(effect, EmitError) for effect in effects)


def test_grace_expiry_after_manual_stop_without_text_cancels() -> None:
    start = Session(state=SessionState.FINALIZING, manual_stop=True)
    session, effects = step(start, TimerFired(TimerKind.GRACE), _profile())
    assert session.state == SessionState.CLOSED
    assert session.outcome == Outcome.CANCELLED


def test_retry_arms_backoff_then_reconnects() -> None:
    errored = Session(state=SessionState.ERRORED)
    session, effects = step(errored, Retry(attempt_count=1, backoff_ms=2000, delay_ms=1000), _profile())
    assert session.attempt_count == 1
    assert session.backoff_ms == 2000
    assert effects == [ArmTimer(TimerKind.BACKOFF, 1.0)]

    reconnected, effects = step(session, TimerFired(TimerKind.BACKOFF), _profile())
    assert reconnected.state == SessionState.CONNECTING
    assert reconnected.session_id != session.session_id
    assert OpenTransport() in effects


def test_give_up_surfaces_error_once() -> None:
    error = ConnectionExhausted("gave up", attempts=3)
    session, effects = step(Session(state=SessionState.ERRORED), GiveUp(error), _profile())
    assert session.state == SessionState.FAILED
    assert session.outcome == Outcome.FAILED
    assert _types(effects).count(EmitError) == 1
    assert effects[-1] == EmitClosed(Outcome.FAILED)


def test_give_up_on_no_speech_reports_no_speech_outcome() -> None:
    session, effects = step(Session(state=SessionState.ERRORED), GiveUp(NoSpeechError("silence")), _profile())
    assert session.outcome == Outcome.NO_SPEECH
    assert effects[-1] == EmitClosed(Outcome.NO_SPEECH)


def test_give_up_after_manual_stop_closes_quietly() -> None:
    start = replace(Session(state=SessionState.ERRORED), manual_stop=True)
    session, effects = step(start, GiveUp(None), _profile())
    assert session.state == SessionState.CLOSED
    assert not any(isinstance(effect, EmitError) for effect in effects)


def test_stop_during_backoff_closes_without_error() -> None:
    session, effects = step(Session(state=SessionState.ERRORED), StopRequested(), _profile())
    assert session.state == SessionState.CLOSED
    assert session.outcome == Outcome.CANCELLED
    assert not any(isinstance(effect, EmitError) for effect in effects)


def test_service_error_while_finalizing_keeps_its_classification() -> None:
    finalizing, _ = step(Session(state=SessionState.STREAMING), AudioEnded(), _profile())
    error = MessageReceived(ServerMessage(kind=MessageKind.ERROR, code=4004, message="quota exhausted"))
    session, effects = step(finalizing, error, _profile())
    assert session.state == SessionState.ERRORED
    assert session.last_error.kind == ErrorKind.SERVICE_FATAL
    assert isinstance(effects[-1], ReportFailure)


def test_transport_failure_while_finalizing_is_not_no_speech() -> None:
    finalizing = Session(state=SessionState.FINALIZING)
    session, effects = step(finalizing, TransportFailed(TransportError("reset")), _profile())
    assert session.state == SessionState.ERRORED
    assert session.last_error.kind == ErrorKind.TRANSPORT
    assert effects[-1] == ReportFailure(session.last_error)


def test_failure_after_final_just_closes() -> None:
    start = Session(
        state=SessionState.FINALIZING,
        accumulated_final_text="hi",
        final_delivered=True,
        outcome=Outcome.FINAL,
    )
    error = MessageReceived(ServerMessage(kind=MessageKind.ERROR, code=4004))
    session, effects = step(start, error, _profile())
    assert session.state == SessionState.CLOSED
    assert effects[-1] == EmitClosed(Outcome.FINAL)


def test_stop_after_audio_end_shortens_grace_once() -> None:
    finalizing, effects = step(Session(state=SessionState.STREAMING), AudioEnded(), _profile())
    assert ArmTimer(TimerKind.GRACE, 30.0) in effects

    stopped, effects = step(finalizing, StopRequested(), _profile())
    assert stopped.manual_stop
    assert effects == [ArmTimer(TimerKind.GRACE, 0.5)]

    _, effects = step(stopped, StopRequested(), _profile())
    assert effects == []
