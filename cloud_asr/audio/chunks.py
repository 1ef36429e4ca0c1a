from __future__ import annotations

from collections.abc import Iterator

from cloud_asr.config.audio import ASR_SAMPLE_WIDTH_BYTES


def iter_pcm16_chunks(pcm_bytes: bytes, *, chunk_bytes: int) -> Iterator[bytes]:
    if chunk_bytes <= 0 or chunk_bytes % ASR_SAMPLE_WIDTH_BYTES:
        raise ValueError("chunk_bytes must be a positive multiple of the sample width")
    for i in range(0, len(pcm_bytes), chunk_bytes):
        yield pcm_bytes[i : i + chunk_bytes]


__all__ = ["iter_pcm16_chunks"]
