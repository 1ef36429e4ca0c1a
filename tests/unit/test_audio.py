from __future__ import annotations

import asyncio
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from cloud_asr.audio import (
    PushSource,
    BufferSource,
    to_mono,
    float_to_pcm16,
    is_valid_frame,
    resample_to_16k,
    iter_pcm16_chunks,
    file_to_pcm16_mono_16k,
)


def test_float_to_pcm16_clips_asymmetrically() -> None:
    pcm = float_to_pcm16(np.array([-2.0, -1.0, 0.0, 0.5, 1.0, 3.0], dtype=np.float32))
    samples = np.frombuffer(pcm, dtype="<i2").tolist()
    assert samples == [-32768, -32768, 0, 16383, 32767, 32767]


def test_to_mono_averages_channels() -> None:
    stereo = np.array([[1.0, 0.0], [0.5, 0.5]], dtype=np.float32)
    assert to_mono(stereo).tolist() == [0.5, 0.5]
    assert to_mono(np.zeros(3, dtype=np.float32)).shape == (3,)


def test_resample_to_16k_changes_length() -> None:
    x = np.zeros(48000, dtype=np.float32)
    assert abs(len(resample_to_16k(x, 48000)) - 16000) <= 1
    assert resample_to_16k(x[:100], 16000).shape == (100,)


def test_frame_validation() -> None:
    assert is_valid_frame(b"\x00\x00")
    assert not is_valid_frame(b"")
    assert not is_valid_frame(b"\x00")


def test_chunking_keeps_whole_samples() -> None:
    chunks = list(iter_pcm16_chunks(b"\x01\x00" * 5, chunk_bytes=4))
    assert chunks == [b"\x01\x00\x01\x00", b"\x01\x00\x01\x00", b"\x01\x00"]
    with pytest.raises(ValueError):
        list(iter_pcm16_chunks(b"\x00\x00", chunk_bytes=3))


def test_file_decoding_resamples_to_mono_16k(tmp_path: Path) -> None:
    path = tmp_path / "tone.wav"
    t = np.arange(8000, dtype=np.float32) / 8000.0
    tone = 0.25 * np.sin(2 * np.pi * 440.0 * t)
    sf.write(path, np.stack([tone, tone], axis=1), 8000)

    pcm = file_to_pcm16_mono_16k(str(path))
    assert abs(len(pcm) // 2 - 16000) <= 2


@pytest.mark.asyncio
async def test_buffer_source_yields_chunks_and_releases_once() -> None:
    source = BufferSource(bytes(3200), chunk_samples=400, realtime=False)
    await source.open()
    chunks = [chunk async for chunk in source.frames()]
    assert len(chunks) == 4
    assert all(len(chunk) == 800 for chunk in chunks)

    source.close()
    source.close()
    assert source.releases == 1


@pytest.mark.asyncio
async def test_push_source_delivers_in_order_then_ends() -> None:
    source = PushSource(queue_max=4)
    assert source.push(b"\x01\x00")
    assert source.push(b"\x02\x00")
    assert not source.push(b"\x03")
    source.end()
    assert not source.push(b"\x04\x00")

    frames = [frame async for frame in source.frames()]
    assert frames == [b"\x01\x00", b"\x02\x00"]
    assert source.dropped_frames == 2


@pytest.mark.asyncio
async def test_push_source_drops_when_full() -> None:
    source = PushSource(queue_max=1)
    assert source.push(b"\x00\x00")
    assert not source.push(b"\x00\x00")
    source.close()
    assert await asyncio.wait_for(_drain(source), timeout=1.0) == []


async def _drain(source: PushSource) -> list[bytes]:
    return [frame async for frame in source.frames()]
