"""Audio frame format expected by the recognition service."""

from __future__ import annotations

from ._env import get_int

# PCM16 little-endian, mono, 16kHz. The service mis-decodes anything else.
ASR_SAMPLE_RATE_HZ: int = 16000
ASR_CHANNELS: int = 1
ASR_SAMPLE_WIDTH_BYTES: int = 2

# Capture block size; 4096 samples is 256ms at 16kHz.
CAPTURE_BLOCK_SAMPLES: int = max(160, get_int("ASR_CAPTURE_BLOCK_SAMPLES", 4096))
CAPTURE_QUEUE_MAX: int = max(1, get_int("ASR_CAPTURE_QUEUE_MAX", 64))

PCM16_NEGATIVE_SCALE: float = 32768.0
PCM16_POSITIVE_SCALE: float = 32767.0

__all__ = [
    "ASR_CHANNELS",
    "ASR_SAMPLE_RATE_HZ",
    "ASR_SAMPLE_WIDTH_BYTES",
    "CAPTURE_BLOCK_SAMPLES",
    "CAPTURE_QUEUE_MAX",
    "PCM16_NEGATIVE_SCALE",
    "PCM16_POSITIVE_SCALE",
]
