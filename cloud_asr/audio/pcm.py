"""PCM16 conversion helpers (float capture -> 16kHz mono int16)."""

from __future__ import annotations

import numpy as np
import soxr

from cloud_asr.config.audio import (
    ASR_SAMPLE_RATE_HZ,
    PCM16_NEGATIVE_SCALE,
    PCM16_POSITIVE_SCALE,
    ASR_SAMPLE_WIDTH_BYTES,
)


def to_mono(x: np.ndarray) -> np.ndarray:
    if x.ndim == 1:
        return x
    return x.mean(axis=1, dtype=np.float32)


def resample_to_16k(x: np.ndarray, sr: int) -> np.ndarray:
    """Resample mono float audio to the service rate."""
    if int(sr) == ASR_SAMPLE_RATE_HZ:
        return x.astype(np.float32, copy=False)
    # soxr expects float32 for best results.
    y = soxr.resample(x.astype(np.float32, copy=False), int(sr), ASR_SAMPLE_RATE_HZ)
    return y.astype(np.float32, copy=False)


def float_to_pcm16(x: np.ndarray) -> bytes:
    # Asymmetric scaling: -1.0 maps to -32768, +1.0 to 32767.
    clipped = np.clip(np.asarray(x, dtype=np.float32), -1.0, 1.0)
    scaled = np.where(clipped < 0, clipped * PCM16_NEGATIVE_SCALE, clipped * PCM16_POSITIVE_SCALE)
    return scaled.astype("<i2").tobytes()


def is_valid_frame(frame: bytes) -> bool:
    return bool(frame) and len(frame) % ASR_SAMPLE_WIDTH_BYTES == 0


__all__ = [
    "float_to_pcm16",
    "is_valid_frame",
    "resample_to_16k",
    "to_mono",
]
