"""Audio framing and sources.

The microphone source is imported from `cloud_asr.audio.microphone` directly:
PortAudio is only needed when a device is actually captured.
"""

from .pcm import to_mono, float_to_pcm16, is_valid_frame, resample_to_16k
from .files import file_to_pcm16_mono_16k
from .push import PushSource
from .buffer import BufferSource
from .chunks import iter_pcm16_chunks
from .source import AudioSource

__all__ = [
    "AudioSource",
    "BufferSource",
    "PushSource",
    "file_to_pcm16_mono_16k",
    "float_to_pcm16",
    "is_valid_frame",
    "iter_pcm16_chunks",
    "resample_to_16k",
    "to_mono",
]
