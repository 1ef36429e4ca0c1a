"""Per-session timers: one asyncio task per timer kind."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from cloud_asr.state import TimerKind

logger = logging.getLogger(__name__)


class TimerSet:
    """Arms, re-arms and cancels the timers owned by one session.

    Every arm gets a fresh token; a fired timer reports `(kind, token)` and the
    owner checks `is_current()` before acting, so a timer cancelled after it
    already fired (but before its event was processed) is recognizably stale.
    """

    def __init__(self, on_fire: Callable[[TimerKind, int], None]) -> None:
        self._on_fire = on_fire
        self._tasks: dict[TimerKind, asyncio.Task] = {}
        self._tokens: dict[TimerKind, int] = {}
        self._serial = 0
        self.armed_total = 0
        self.cancelled_total = 0

    def arm(self, kind: TimerKind, seconds: float) -> int:
        self.cancel(kind)
        self._serial += 1
        token = self._serial
        self._tokens[kind] = token
        self._tasks[kind] = asyncio.create_task(self._run(kind, token, seconds), name=f"asr-timer-{kind.value}")
        self.armed_total += 1
        return token

    async def _run(self, kind: TimerKind, token: int, seconds: float) -> None:
        try:
            await asyncio.sleep(max(0.0, seconds))
        except asyncio.CancelledError:
            return
        if self._tokens.get(kind) != token:
            return
        self._tasks.pop(kind, None)
        logger.debug("timer fired: %s", kind.value)
        self._on_fire(kind, token)

    def is_current(self, kind: TimerKind, token: int) -> bool:
        return self._tokens.get(kind) == token

    def consume(self, kind: TimerKind) -> None:
        self._tokens.pop(kind, None)

    def cancel(self, kind: TimerKind) -> None:
        self._tokens.pop(kind, None)
        task = self._tasks.pop(kind, None)
        if task is not None and not task.done():
            task.cancel()
            self.cancelled_total += 1

    def cancel_all(self) -> None:
        for kind in set(self._tokens) | set(self._tasks):
            self.cancel(kind)

    @property
    def pending(self) -> set[TimerKind]:
        return {kind for kind, task in self._tasks.items() if not task.done()}


__all__ = ["TimerSet"]
