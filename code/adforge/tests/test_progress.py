from __future__ import annotations

import asyncio

import pytest

from adforge.progress import FakeProgress, advance

pytestmark = pytest.mark.unit


def test_advance_stops_at_cap():
    assert advance(10.0, 5.0) == 15.0
    assert advance(94.0, 5.0) == 95.0
    assert advance(95.0, 5.0, cap=95.0) == 95.0


def test_default_increment_spreads_over_forty_five_minutes():
    progress = FakeProgress()
    # 2700 s / 0.5 s = 5400 ticks to cover 100%
    assert progress.increment == pytest.approx(100.0 / 5400)


def test_rejects_non_positive_timing():
    with pytest.raises(ValueError):
        FakeProgress(duration_s=0)
    with pytest.raises(ValueError):
        FakeProgress(tick_s=-1)


@pytest.mark.asyncio
async def test_ticks_never_reach_100_until_complete():
    updates = []
    progress = FakeProgress(duration_s=10, tick_s=1, on_update=updates.append)

    for _ in range(20):
        await progress.tick()

    assert progress.value == 95.0
    assert max(updates) == 95.0

    await progress.complete()
    assert progress.value == 100.0
    assert updates[-1] == 100.0

    # Completed progress ignores further ticks
    await progress.tick()
    assert progress.value == 100.0


@pytest.mark.asyncio
async def test_background_ticker_and_reset():
    progress = FakeProgress(duration_s=0.1, tick_s=0.01)

    progress.start()
    await asyncio.sleep(0.05)
    await progress.stop()
    stopped_at = progress.value
    assert 0 < stopped_at <= 95.0

    await asyncio.sleep(0.03)
    assert progress.value == stopped_at

    await progress.reset()
    assert progress.value == 0.0
    assert not progress.completed
