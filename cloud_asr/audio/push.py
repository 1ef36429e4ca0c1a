"""Audio source fed frame by frame by the caller."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from cloud_asr.config.audio import CAPTURE_QUEUE_MAX

from .pcm import is_valid_frame


class PushSource:
    """Frames pushed with `push()` come out of `frames()` in order.

    `end()` finishes the stream after the queued frames; `close()` drops
    whatever is still queued. When the queue is full the newest frame is dropped.
    """

    def __init__(self, *, queue_max: int = CAPTURE_QUEUE_MAX) -> None:
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue(maxsize=max(1, queue_max))
        self.dropped_frames = 0
        self.ended = False
        self.closed = False

    async def open(self) -> None:
        return None

    def push(self, frame: bytes) -> bool:
        if self.ended or self.closed or not is_valid_frame(frame):
            self.dropped_frames += 1
            return False
        try:
            self._queue.put_nowait(bytes(frame))
        except asyncio.QueueFull:
            self.dropped_frames += 1
            return False
        return True

    def end(self) -> None:
        if self.ended or self.closed:
            return
        self.ended = True
        self._put_sentinel()

    def _put_sentinel(self) -> None:
        while True:
            try:
                self._queue.put_nowait(None)
                return
            except asyncio.QueueFull:
                self._queue.get_nowait()
                self.dropped_frames += 1

    async def frames(self) -> AsyncIterator[bytes]:
        while not self.closed:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._put_sentinel()


__all__ = ["PushSource"]
