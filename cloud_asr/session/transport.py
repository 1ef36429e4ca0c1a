"""WebSocket transport for one connection attempt.

The transport never raises into the manager: connection outcomes, frames,
closes and failures are all reported through `on_event` as session events.
"""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable, Awaitable

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

from cloud_asr.protocol import parse_server_message
from cloud_asr.errors import ProtocolError, TransportError
from cloud_asr.config.session import (
    WS_OPEN_TIMEOUT_S,
    WS_CLOSE_NORMAL_CODE,
    WS_MAX_MESSAGE_BYTES,
    WS_CLOSE_ABNORMAL_CODE,
)

from .events import (
    Event,
    TransportClosed,
    TransportFailed,
    TransportOpened,
    MessageReceived,
    MalformedMessage,
)

logger = logging.getLogger(__name__)

ConnectFn = Callable[..., Awaitable[Any]]


def get_ws_options(*, open_timeout_s: float = WS_OPEN_TIMEOUT_S, max_size: int = WS_MAX_MESSAGE_BYTES) -> dict[str, Any]:
    return {
        "open_timeout": open_timeout_s,
        "max_size": max_size,
        "close_timeout": 1.0,
    }


def _close_details(exc: ConnectionClosed) -> tuple[int, str]:
    frame = exc.rcvd or exc.sent
    if frame is None:
        return WS_CLOSE_ABNORMAL_CODE, ""
    return int(frame.code), frame.reason or ""


class Transport:
    def __init__(
        self,
        url: str,
        *,
        on_event: Callable[[Event], None],
        connect: ConnectFn | None = None,
        ws_options: dict[str, Any] | None = None,
    ) -> None:
        self.url = url
        self._on_event = on_event
        self._connect = connect or websockets.connect
        self._ws_options = ws_options if ws_options is not None else get_ws_options()
        self._ws: Any = None
        self._reader: asyncio.Task | None = None
        self.closed = False

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self.closed

    async def open(self) -> None:
        try:
            ws = await self._connect(self.url, **self._ws_options)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.info("transport: connect failed: %s", exc)
            self._on_event(TransportFailed(TransportError(f"connect failed: {exc}")))
            return
        if self.closed:
            with contextlib.suppress(Exception):
                await ws.close(code=WS_CLOSE_NORMAL_CODE)
            return
        self._ws = ws
        self._on_event(TransportOpened())
        self._reader = asyncio.create_task(self._read_loop(ws), name="asr-transport-reader")

    async def _read_loop(self, ws: Any) -> None:
        try:
            async for raw in ws:
                try:
                    message = parse_server_message(raw)
                except ProtocolError as exc:
                    logger.debug("transport: malformed message: %s", exc)
                    self._on_event(MalformedMessage(exc))
                    continue
                self._on_event(MessageReceived(message))
        except asyncio.CancelledError:
            raise
        except ConnectionClosed as exc:
            code, reason = _close_details(exc)
            self._on_event(TransportClosed(code=code, reason=reason, clean=isinstance(exc, ConnectionClosedOK)))
            return
        except Exception as exc:
            self._on_event(TransportFailed(TransportError(f"receive failed: {exc}")))
            return
        code = getattr(ws, "close_code", None) or WS_CLOSE_NORMAL_CODE
        reason = getattr(ws, "close_reason", None) or ""
        self._on_event(TransportClosed(code=int(code), reason=reason, clean=True))

    async def _send(self, data: str | bytes) -> bool:
        if not self.is_open:
            return False
        try:
            await self._ws.send(data)
        except ConnectionClosed:
            # The reader reports the close.
            return False
        except Exception as exc:
            self._on_event(TransportFailed(TransportError(f"send failed: {exc}")))
            return False
        return True

    async def send_audio(self, frame: bytes) -> bool:
        return await self._send(frame)

    async def send_text(self, text: str) -> bool:
        return await self._send(text)

    async def close(self, code: int = WS_CLOSE_NORMAL_CODE) -> None:
        if self.closed:
            return
        self.closed = True
        reader, self._reader = self._reader, None
        if reader is not None:
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await reader
        ws, self._ws = self._ws, None
        if ws is not None:
            with contextlib.suppress(Exception):
                await ws.close(code=code)


__all__ = ["ConnectFn", "Transport", "get_ws_options"]
