"""Microphone capture through PortAudio (sounddevice).

Blocks arrive on PortAudio's callback thread as float32 at the device rate;
they are resampled to 16kHz, quantized to PCM16 and handed to the event loop
with `call_soon_threadsafe`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from collections.abc import AsyncIterator

import numpy as np
import soxr
import sounddevice as sd

from cloud_asr.state import AudioSettings
from cloud_asr.errors import AudioPermissionError
from cloud_asr.config.audio import ASR_CHANNELS, CAPTURE_QUEUE_MAX, ASR_SAMPLE_RATE_HZ, CAPTURE_BLOCK_SAMPLES

from .pcm import to_mono, float_to_pcm16

logger = logging.getLogger(__name__)


class MicrophoneSource:
    def __init__(
        self,
        settings: AudioSettings | None = None,
        *,
        device: int | str | None = None,
        samplerate: int | None = None,
    ) -> None:
        self.device = device
        self.samplerate = samplerate
        self.block_samples = settings.block_samples if settings else CAPTURE_BLOCK_SAMPLES
        self.queue_max = settings.queue_max if settings else CAPTURE_QUEUE_MAX
        self.dropped_blocks = 0
        self.closed = False
        self._stream: sd.InputStream | None = None
        self._resampler: soxr.ResampleStream | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[bytes | None] | None = None

    async def open(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self.queue_max)
        try:
            rate = self.samplerate or int(sd.query_devices(self.device, "input")["default_samplerate"])
            # Device blocks cover the same wall time as a 16kHz capture block.
            blocksize = max(1, int(self.block_samples * rate / ASR_SAMPLE_RATE_HZ))
            self._resampler = soxr.ResampleStream(rate, ASR_SAMPLE_RATE_HZ, ASR_CHANNELS, dtype="float32")
            self._stream = sd.InputStream(
                samplerate=rate,
                channels=ASR_CHANNELS,
                dtype="float32",
                blocksize=blocksize,
                device=self.device,
                callback=self._on_block,
            )
            self._stream.start()
        except (sd.PortAudioError, OSError, ValueError) as exc:
            self._discard_stream()
            raise AudioPermissionError(f"microphone unavailable: {exc}") from exc
        logger.info("microphone: capturing at %d Hz (device=%s)", rate, self.device)

    def _on_block(self, indata: np.ndarray, frames: int, time_info: Any, status: sd.CallbackFlags) -> None:
        if status:
            logger.debug("microphone: %s", status)
        if self._resampler is None or self._loop is None:
            return
        y = self._resampler.resample_chunk(to_mono(indata).astype(np.float32, copy=False))
        if y.size:
            self._loop.call_soon_threadsafe(self._enqueue, float_to_pcm16(y))

    def _enqueue(self, frame: bytes | None) -> None:
        if self._queue is None:
            return
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            # Oldest audio goes first; the consumer is paused (e.g. reconnecting).
            self.dropped_blocks += 1
            self._queue.get_nowait()
            self._queue.put_nowait(frame)

    async def frames(self) -> AsyncIterator[bytes]:
        if self._queue is None:
            return
        while not self.closed:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame

    def _discard_stream(self) -> None:
        stream, self._stream = self._stream, None
        self._resampler = None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._discard_stream()
        self._enqueue(None)
        if self.dropped_blocks:
            logger.info("microphone: released (%d blocks dropped while paused)", self.dropped_blocks)
        else:
            logger.info("microphone: released")


__all__ = ["MicrophoneSource"]
