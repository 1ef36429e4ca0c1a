"""Recognition client: the entry point for starting streaming sessions."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Mapping

from cloud_asr.audio import PushSource, AudioSource
from cloud_asr.retry import ReconnectPolicy
from cloud_asr.signing import Signer
from cloud_asr.runtime import load_settings
from cloud_asr.state import ClientSettings, RecognitionResult
from cloud_asr.state.credentials import Credentials
from cloud_asr.session import ConnectFn, SessionHandle, SessionManager, SessionCallbacks
from cloud_asr.session.callbacks import TextCallback, ErrorCallback, ClosedCallback

logger = logging.getLogger(__name__)


class RecognitionClient:
    """Owns the audio device for at most one active session at a time.

    Starting a new session stops the previous one first. Configuration errors
    are raised from `start()` before any I/O; a device that cannot be acquired
    raises `AudioPermissionError` from `start()`. Everything after that is
    reported through the callbacks.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        signer: Signer | None = None,
        connect: ConnectFn | None = None,
        policy: ReconnectPolicy | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.signer = signer or Signer.from_settings(self.settings.signing)
        self.policy = policy or ReconnectPolicy(self.settings.retry)
        self._connect = connect
        self._active: SessionHandle | None = None

    @property
    def active(self) -> SessionHandle | None:
        if self._active is not None and not self._active.active:
            self._active = None
        return self._active

    async def start(
        self,
        credentials: Credentials,
        parameters: Mapping[str, Any] | None = None,
        on_interim: TextCallback | None = None,
        on_final: TextCallback | None = None,
        on_error: ErrorCallback | None = None,
        *,
        on_closed: ClosedCallback | None = None,
        source: AudioSource | None = None,
    ) -> SessionHandle:
        previous = self.active
        if previous is not None:
            logger.info("client: stopping session %s before starting a new one", previous.handle_id)
            await self.stop(previous)

        # Raises ConfigurationError for bad credentials or parameters.
        first_request = self.signer.sign(credentials, parameters)

        source = source or PushSource(queue_max=self.settings.audio.queue_max)
        await source.open()

        manager = SessionManager(
            credentials=credentials,
            parameters=parameters,
            signer=self.signer,
            profile=self.settings.session,
            policy=self.policy,
            callbacks=SessionCallbacks(on_interim, on_final, on_error, on_closed),
            source=source,
            connect=self._connect,
            first_request=first_request,
        )
        handle = SessionHandle(manager)
        self._active = handle
        manager.start()
        logger.info("client: started session %s (%s)", handle.handle_id, self.signer.scheme.value)
        return handle

    async def stop(self, handle: SessionHandle | None = None) -> RecognitionResult | None:
        """Stop `handle` (default: the active session) and wait for it to close."""
        handle = handle or self._active
        if handle is None:
            return None
        handle.stop()
        result = await handle.wait()
        if self._active is handle:
            self._active = None
        return result

    def feed_audio(self, handle: SessionHandle, frame: bytes) -> bool:
        return handle.feed_audio(frame)


__all__ = ["RecognitionClient"]
