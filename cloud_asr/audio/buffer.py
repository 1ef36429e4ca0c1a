"""Recorded PCM16 buffer replayed as a real-time audio source."""

from __future__ import annotations

import time
import asyncio
import logging
from collections.abc import AsyncIterator

from cloud_asr.config.audio import ASR_SAMPLE_RATE_HZ, ASR_SAMPLE_WIDTH_BYTES, CAPTURE_BLOCK_SAMPLES

from .chunks import iter_pcm16_chunks

logger = logging.getLogger(__name__)

_MIN_SLEEP_S = 0.001


class BufferSource:
    """Stream a PCM16 buffer in capture-sized chunks paced to wall-clock time."""

    def __init__(
        self,
        pcm_bytes: bytes,
        *,
        chunk_samples: int = CAPTURE_BLOCK_SAMPLES,
        realtime: bool = True,
    ) -> None:
        self.pcm_bytes = pcm_bytes
        self.chunk_bytes = int(chunk_samples) * ASR_SAMPLE_WIDTH_BYTES
        self.realtime = realtime
        self.opened = False
        self.closed = False
        self.releases = 0

    async def open(self) -> None:
        self.opened = True

    async def frames(self) -> AsyncIterator[bytes]:
        t0 = time.perf_counter()
        samples_sent = 0
        for chunk in iter_pcm16_chunks(self.pcm_bytes, chunk_bytes=self.chunk_bytes):
            if self.closed:
                return
            yield chunk
            samples_sent += len(chunk) // ASR_SAMPLE_WIDTH_BYTES
            if not self.realtime:
                await asyncio.sleep(0)
                continue
            sleep_for = t0 + samples_sent / ASR_SAMPLE_RATE_HZ - time.perf_counter()
            await asyncio.sleep(max(sleep_for, _MIN_SLEEP_S))

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.releases += 1
        logger.debug("buffer source released (%d bytes)", len(self.pcm_bytes))


__all__ = ["BufferSource"]
