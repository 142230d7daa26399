"""
Block Timer Tests

Tests for BlockTimer showing:
- Single-shot firing
- Cancellation
- Re-arming from inside the callback (rotation)

To run:
    pytest tests/recording/controllers/test_block_timer.py -v
"""

import asyncio

import pytest

from recording.controllers.block_timer import BlockTimer

SHORT = 0.01


class FireRecorder:
    """Async callback that counts invocations"""

    def __init__(self):
        self.count = 0
        self.armed_during_fire = []
        self.timer = None

    async def __call__(self):
        self.count += 1
        if self.timer is not None:
            self.armed_during_fire.append(self.timer.is_armed)


@pytest.mark.unit
async def test_timer_fires_once():
    """
    Test timer fires after its duration.

    Should:
    - Call on_fire exactly once
    - Be disarmed afterwards
    """
    on_fire = FireRecorder()
    timer = BlockTimer(on_fire=on_fire, duration=SHORT)

    timer.start()
    assert timer.is_armed

    await asyncio.sleep(SHORT * 5)

    assert on_fire.count == 1
    assert timer.fire_count == 1
    assert timer.is_armed is False


@pytest.mark.unit
async def test_stopped_timer_never_fires():
    """Test stop() cancels a pending fire."""
    on_fire = FireRecorder()
    timer = BlockTimer(on_fire=on_fire, duration=SHORT)

    timer.start()
    timer.stop()
    await asyncio.sleep(SHORT * 5)

    assert on_fire.count == 0
    assert timer.is_armed is False


@pytest.mark.unit
async def test_stop_when_idle_is_safe():
    """Test stop() on an unarmed timer does nothing."""
    timer = BlockTimer(on_fire=FireRecorder(), duration=SHORT)
    timer.stop()
    assert timer.is_armed is False


@pytest.mark.unit
async def test_restart_replaces_pending_timer():
    """Test start() while armed leaves only one pending fire."""
    on_fire = FireRecorder()
    timer = BlockTimer(on_fire=on_fire, duration=SHORT)

    timer.start()
    timer.start()
    await asyncio.sleep(SHORT * 5)

    assert on_fire.count == 1


@pytest.mark.unit
async def test_timer_disarmed_before_callback():
    """Test the handle is cleared before on_fire runs."""
    on_fire = FireRecorder()
    timer = BlockTimer(on_fire=on_fire, duration=SHORT)
    on_fire.timer = timer

    timer.start()
    await asyncio.sleep(SHORT * 5)

    assert on_fire.armed_during_fire == [False]


@pytest.mark.unit
async def test_callback_can_rearm():
    """Test a rotation callback re-arming the timer keeps it armed."""
    fired = []

    async def rotate():
        fired.append(True)
        timer.stop()
        timer.start()

    timer = BlockTimer(on_fire=rotate, duration=SHORT)
    timer.start()
    await asyncio.sleep(SHORT * 3)

    assert fired
    assert timer.is_armed
    timer.stop()


@pytest.mark.unit
async def test_callback_error_is_logged(caplog):
    """Test a raising callback is logged, not propagated."""

    async def broken():
        raise RuntimeError("boom")

    timer = BlockTimer(on_fire=broken, duration=SHORT)
    timer.start()
    await asyncio.sleep(SHORT * 5)

    assert timer.fire_count == 1
    assert "Error in block timer callback: boom" in caplog.text
