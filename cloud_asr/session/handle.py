"""Caller-facing handle for one recognition session."""

from __future__ import annotations

import logging

from cloud_asr.state import SessionState, RecognitionResult

from .manager import SessionManager

logger = logging.getLogger(__name__)


class SessionHandle:
    """Stable identity for a session across reconnects.

    The internal session id changes on every reconnect; `handle_id` does not.
    None of the methods raise: failures reach the caller through `on_error`
    and the result returned by `wait()`.
    """

    def __init__(self, manager: SessionManager) -> None:
        self._manager = manager
        self.handle_id = manager.session.session_id

    @property
    def session_id(self) -> str:
        return self._manager.session.session_id

    @property
    def state(self) -> SessionState:
        return self._manager.state

    @property
    def active(self) -> bool:
        return not self._manager.state.is_terminal

    @property
    def manager(self) -> SessionManager:
        return self._manager

    def feed_audio(self, frame: bytes) -> bool:
        """Queue one PCM16 frame; dropped unless the session is streaming."""
        try:
            return self._manager.feed(frame)
        except Exception:
            logger.warning("session %s: dropping audio frame", self.handle_id, exc_info=True)
            return False

    def end_audio(self) -> None:
        end = getattr(self._manager.source, "end", None)
        if end is not None:
            end()

    def stop(self) -> None:
        self._manager.request_stop()

    async def wait(self) -> RecognitionResult:
        return await self._manager.wait()

    def __repr__(self) -> str:
        return f"SessionHandle(id={self.handle_id!r}, state={self.state.value!r})"


__all__ = ["SessionHandle"]
