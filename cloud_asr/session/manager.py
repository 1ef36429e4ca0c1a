"""Session manager: runs the state machine against a live transport.

All inputs (transport frames, timer expiries, caller stop, reconnect
decisions) are queued as events and processed by a single loop task, one
batch per tick. Within a batch a caller stop is handled first and timer
expiries last, so a transcript that arrives together with a no-result
timeout cancels that timeout before it is looked at.
"""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Mapping, Callable

from cloud_asr.audio import AudioSource, is_valid_frame
from cloud_asr.errors import ASRError
from cloud_asr.signing import Signer, SignedRequest
from cloud_asr.protocol import encode_start, stop_message
from cloud_asr.retry import ReconnectPolicy
from cloud_asr.state import Outcome, Session, TimerKind, SessionState, SessionSettings, RecognitionResult
from cloud_asr.state.credentials import Credentials

from .timers import TimerSet
from .machine import step
from .callbacks import SessionCallbacks
from .transport import ConnectFn, Transport, get_ws_options
from .events import Event, Retry, Start, GiveUp, AudioEnded, TimerFired, StopRequested, TransportFailed
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

logger = logging.getLogger(__name__)

# (transport serial or None, event)
_Queued = tuple[int | None, Event]


def _priority(item: _Queued) -> int:
    event = item[1]
    if isinstance(event, StopRequested):
        return 0
    if isinstance(event, TimerFired):
        return 2
    return 1


class SessionManager:
    def __init__(
        self,
        *,
        credentials: Credentials,
        parameters: Mapping[str, Any] | None,
        signer: Signer,
        profile: SessionSettings,
        policy: ReconnectPolicy,
        callbacks: SessionCallbacks,
        source: AudioSource | None = None,
        connect: ConnectFn | None = None,
        first_request: SignedRequest | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.credentials = credentials
        self.parameters = dict(parameters or {})
        self.signer = signer
        self.profile = profile
        self.policy = policy
        self.callbacks = callbacks
        self.source = source
        self.session: Session = policy.new_session()
        self.result: RecognitionResult | None = None
        self.release_count = 0

        self._connect = connect
        self._ws_options = get_ws_options(open_timeout_s=profile.open_timeout_s, max_size=profile.max_message_bytes)
        self._pending_request = first_request
        self._request: SignedRequest | None = None
        self._clock = clock
        self._queue: asyncio.Queue[_Queued] = asyncio.Queue()
        self._timers = TimerSet(self._on_timer)
        self._transport: Transport | None = None
        self._serial = 0
        self._open_task: asyncio.Task | None = None
        self._pump_task: asyncio.Task | None = None
        self._loop_task: asyncio.Task | None = None
        self._streaming = asyncio.Event()
        self._released = False
        self._done = asyncio.Event()

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def timers(self) -> TimerSet:
        return self._timers

    def start(self) -> asyncio.Task:
        if self._loop_task is None:
            self._post(Start())
            self._loop_task = asyncio.create_task(self._run(), name=f"asr-session-{self.session.session_id}")
        return self._loop_task

    def request_stop(self) -> None:
        if self._done.is_set() or self.session.state.is_terminal:
            return
        self._post(StopRequested())

    async def wait(self) -> RecognitionResult:
        await self._done.wait()
        return self.result or RecognitionResult(outcome=Outcome.CANCELLED)

    def _post(self, event: Event, serial: int | None = None) -> None:
        self._queue.put_nowait((serial, event))

    def _on_timer(self, kind: TimerKind, token: int) -> None:
        self._post(TimerFired(kind=kind, token=token))

    def _now(self) -> float:
        return self._clock() if self._clock else asyncio.get_running_loop().time()

    async def _run(self) -> None:
        try:
            while not self.session.state.is_terminal:
                for serial, event in await self._next_batch():
                    if self.session.state.is_terminal:
                        break
                    if self._is_stale(serial, event):
                        continue
                    await self._dispatch(event)
        finally:
            await self._teardown()
            self._done.set()

    async def _next_batch(self) -> list[_Queued]:
        batch = [await self._queue.get()]
        while not self._queue.empty():
            batch.append(self._queue.get_nowait())
        return sorted(batch, key=_priority)

    def _is_stale(self, serial: int | None, event: Event) -> bool:
        if serial is not None and serial != self._serial:
            return True
        if isinstance(event, TimerFired):
            if not self._timers.is_current(event.kind, event.token):
                logger.debug("dropping stale %s timer", event.kind.value)
                return True
            self._timers.consume(event.kind)
        return False

    async def _dispatch(self, event: Event) -> None:
        before = self.session.state
        self.session, effects = step(self.session, event, self.profile, now=self._now())
        after = self.session.state
        if after != before:
            logger.debug("session %s: %s -> %s on %s", self.session.session_id, before, after, type(event).__name__)
        if after == SessionState.STREAMING:
            self._streaming.set()
        else:
            self._streaming.clear()
        for effect in effects:
            await self._apply(effect)

    async def _apply(self, effect: Effect) -> None:
        if isinstance(effect, OpenTransport):
            self._open_transport()
        elif isinstance(effect, SendControl):
            await self._send_control(effect.action)
        elif isinstance(effect, ArmTimer):
            self._timers.arm(effect.kind, effect.seconds)
        elif isinstance(effect, CancelTimer):
            self._timers.cancel(effect.kind)
        elif isinstance(effect, CancelAllTimers):
            self._timers.cancel_all()
        elif isinstance(effect, CloseTransport):
            await self._close_transport(effect.code)
        elif isinstance(effect, StartAudio):
            self._start_audio()
        elif isinstance(effect, ReleaseAudio):
            self._release_audio()
        elif isinstance(effect, ReportFailure):
            self._report_failure(effect.error)
        else:
            self._emit(effect)

    def _emit(self, effect: Effect) -> None:
        if isinstance(effect, EmitInterim):
            self.callbacks.interim(effect.text)
        elif isinstance(effect, EmitFinal):
            self.callbacks.final(effect.text)
        elif isinstance(effect, EmitError):
            error = effect.error
            self.callbacks.error(error.kind, f"{error.remediation} ({error})")
        elif isinstance(effect, EmitClosed):
            self.result = RecognitionResult(
                outcome=effect.outcome,
                text=self.session.accumulated_final_text if self.session.final_delivered else "",
                error=self.session.last_error if effect.outcome in (Outcome.FAILED, Outcome.NO_SPEECH) else None,
            )
            logger.info("session %s closed: %s", self.session.session_id, effect.outcome.value)
            self.callbacks.closed(effect.outcome)

    def _open_transport(self) -> None:
        self._serial += 1
        serial = self._serial
        try:
            request = self._pending_request or self.signer.sign(self.credentials, self.parameters)
        except ASRError as exc:
            self._post(TransportFailed(exc), serial)
            return
        finally:
            self._pending_request = None
        self._request = request
        logger.info(
            "session %s: connecting (attempt %d) to %s",
            self.session.session_id,
            self.session.attempt_count,
            request.redacted_url(),
        )
        transport = Transport(
            request.url,
            on_event=lambda event: self._post(event, serial),
            connect=self._connect,
            ws_options=self._ws_options,
        )
        self._transport = transport
        self._open_task = asyncio.create_task(transport.open(), name="asr-transport-open")

    async def _close_transport(self, code: int) -> None:
        # Events still queued from this connection are dropped from now on.
        self._serial += 1
        open_task, self._open_task = self._open_task, None
        transport, self._transport = self._transport, None
        if transport is not None:
            await transport.close(code)
        if open_task is not None and not open_task.done():
            open_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await open_task

    async def _send_control(self, action: str) -> None:
        if self._transport is None or self._request is None:
            return
        voice_id = self._request.voice_id
        if action == "start":
            text = encode_start(voice_id, self._request.params)
        else:
            text = stop_message(self.profile.handshake, voice_id)
        await self._transport.send_text(text)

    def _report_failure(self, error: ASRError) -> None:
        decision = self.policy.decide(self.session, error)
        if decision.retry:
            self._post(Retry(decision.attempt_count, decision.backoff_ms, decision.delay_ms))
        else:
            self._post(GiveUp(decision.error))

    def _start_audio(self) -> None:
        if self.source is None or self._pump_task is not None or self._released:
            return
        self._pump_task = asyncio.create_task(self._pump_audio(self.source), name="asr-audio-pump")

    async def _pump_audio(self, source: AudioSource) -> None:
        frames = source.frames()
        try:
            while True:
                await self._streaming.wait()
                frame = await anext(frames)
                if not is_valid_frame(frame):
                    continue
                # Frames captured while reconnecting are dropped, not queued.
                if self.session.state == SessionState.STREAMING and self._transport is not None:
                    await self._transport.send_audio(frame)
        except StopAsyncIteration:
            self._post(AudioEnded())
        except Exception:
            logger.warning("audio source failed; finishing session", exc_info=True)
            self._post(AudioEnded())

    def feed(self, frame: bytes) -> bool:
        push = getattr(self.source, "push", None)
        if push is None or self.session.state != SessionState.STREAMING:
            return False
        return bool(push(frame))

    def _release_audio(self) -> None:
        if self._released:
            return
        self._released = True
        pump, self._pump_task = self._pump_task, None
        if pump is not None and not pump.done():
            pump.cancel()
        if self.source is not None:
            try:
                self.source.close()
            except Exception:
                logger.warning("audio source close failed", exc_info=True)
        self.release_count += 1

    async def _teardown(self) -> None:
        self._timers.cancel_all()
        await self._close_transport(1000)
        self._release_audio()
        if self.result is None:
            self.result = RecognitionResult(outcome=Outcome.CANCELLED)


__all__ = ["SessionManager"]
