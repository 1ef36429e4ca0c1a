"""Decode audio files into the service frame format."""

from __future__ import annotations

import soundfile as sf

from .pcm import to_mono, float_to_pcm16, resample_to_16k


def file_to_pcm16_mono_16k(path: str) -> bytes:
    """Load an audio file (any format libsndfile reads) as PCM16 mono @16k bytes."""
    x, sr = sf.read(path, dtype="float32", always_2d=False)
    x = resample_to_16k(to_mono(x), int(sr))
    return float_to_pcm16(x)


__all__ = ["file_to_pcm16_mono_16k"]
