"""Audio source contract consumed by the session manager."""

from __future__ import annotations

from typing import Protocol
from collections.abc import AsyncIterator


class AudioSource(Protocol):
    """Produces PCM16 mono 16kHz frames in capture order.

    `open()` acquires the device (may suspend, raises AudioPermissionError);
    `close()` releases it and must be safe to call more than once.
    """

    async def open(self) -> None: ...

    def frames(self) -> AsyncIterator[bytes]: ...

    def close(self) -> None: ...


__all__ = ["AudioSource"]
