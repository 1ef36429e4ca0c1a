from __future__ import annotations

import asyncio

import pytest

from cloud_asr.state import TimerKind
from cloud_asr.session import TimerSet


@pytest.mark.asyncio
async def test_timer_fires_with_its_token() -> None:
    fired: list[tuple[TimerKind, int]] = []
    timers = TimerSet(lambda kind, token: fired.append((kind, token)))

    token = timers.arm(TimerKind.GRACE, 0.01)
    await asyncio.sleep(0.05)

    assert fired == [(TimerKind.GRACE, token)]
    assert timers.is_current(TimerKind.GRACE, token)
    timers.consume(TimerKind.GRACE)
    assert not timers.is_current(TimerKind.GRACE, token)


@pytest.mark.asyncio
async def test_rearming_replaces_the_previous_timer() -> None:
    fired: list[tuple[TimerKind, int]] = []
    timers = TimerSet(lambda kind, token: fired.append((kind, token)))

    first = timers.arm(TimerKind.NO_RESULT, 0.02)
    second = timers.arm(TimerKind.NO_RESULT, 0.03)
    await asyncio.sleep(0.08)

    assert first != second
    assert fired == [(TimerKind.NO_RESULT, second)]
    assert not timers.is_current(TimerKind.NO_RESULT, first)
    assert timers.cancelled_total == 1


@pytest.mark.asyncio
async def test_cancel_all_stops_everything() -> None:
    fired: list[tuple[TimerKind, int]] = []
    timers = TimerSet(lambda kind, token: fired.append((kind, token)))

    timers.arm(TimerKind.HANDSHAKE, 0.02)
    timers.arm(TimerKind.BACKOFF, 0.02)
    assert timers.pending == {TimerKind.HANDSHAKE, TimerKind.BACKOFF}

    timers.cancel_all()
    await asyncio.sleep(0.05)

    assert fired == []
    assert timers.pending == set()
    assert timers.armed_total == 2
