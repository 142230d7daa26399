"""
Core Test Configuration and Fixtures

Two ways to drive the RecorderMachine:
- scripted_callbacks: a scripted RecorderCallbacks double that records calls
- recorder_rig: the real controllers wired through ServiceCallbacks, with
  mock capture, mock frames and in-memory storage
"""

import asyncio
from types import SimpleNamespace
from typing import List, Optional

import pytest

from core.state_machine import MachineState, RecorderCallbacks, RecorderMachine
from recorder_service import ServiceCallbacks
from recording import BlockRecorder, BlockTimer, ThumbnailSampler
from recording.implementations.mock_capture import MockCapture
from recording.implementations.mock_frame_source import MockFrameSource
from recording.interfaces.capture_interface import CaptureResult, CaptureUnavailableError
from storage import Session, StorageController, StorageUnavailableError, Thumbnail
from storage.implementations.mock_storage import MockStorage

# Long enough that nothing fires on its own during a test
IDLE_TIMER_SECONDS = 3600


class ScriptedCallbacks(RecorderCallbacks):
    """
    RecorderCallbacks double.

    Records every call by name, returns a configurable capture result and
    can be told to fail or to hold the capture stop until released.
    """

    def __init__(self, clock):
        self.clock = clock
        self.calls: List[str] = []
        self.states: List[MachineState] = []
        self.saved: List[Session] = []

        self.result: Optional[CaptureResult] = CaptureResult(b"media", 5000.0)
        self.fail_start = False
        self.fail_save = False
        self.fail_observer = False
        self.stop_gate: Optional[asyncio.Event] = None

    def on_start_recording(self) -> None:
        self.calls.append("start_recording")
        if self.fail_start:
            raise CaptureUnavailableError("camera busy")

    async def on_stop_recording(self) -> Optional[CaptureResult]:
        self.calls.append("stop_recording")
        if self.stop_gate is not None:
            await self.stop_gate.wait()
        return self.result

    def on_start_thumbnails(self, block_start: float) -> None:
        self.calls.append("start_thumbnails")

    def on_stop_thumbnails(self) -> List[Thumbnail]:
        self.calls.append("stop_thumbnails")
        return [Thumbnail(time=0.0, image=b"\xff\xd8thumb")]

    def on_start_block_timer(self) -> None:
        self.calls.append("start_timer")

    def on_stop_block_timer(self) -> None:
        self.calls.append("stop_timer")

    async def on_save_block(self, result, thumbnails, block_start) -> Optional[Session]:
        self.calls.append("save_block")
        if self.fail_save:
            raise StorageUnavailableError("disk full")
        session = Session(
            id=f"session-{len(self.saved) + 1}",
            created_at=block_start,
            duration=result.duration_seconds,
            thumbnails=list(thumbnails),
        )
        self.saved.append(session)
        return session

    def on_state_change(self, state: MachineState) -> None:
        self.states.append(state)
        if self.fail_observer:
            raise RuntimeError("observer broke")

    def now(self) -> float:
        return self.clock()


@pytest.fixture
def scripted_callbacks(fake_clock):
    """Provide a fresh ScriptedCallbacks bound to the fake clock"""
    return ScriptedCallbacks(fake_clock)


@pytest.fixture
def machine(scripted_callbacks):
    """Provide a RecorderMachine driven by ScriptedCallbacks"""
    return RecorderMachine(scripted_callbacks)


@pytest.fixture
async def recorder_rig(fake_clock):
    """
    Provide the real controllers wired to a machine.

    Usage:
        async def test_rotation(recorder_rig):
            recorder_rig.machine.enable()
            ...
            recorder_rig.store.list_all()
    """
    capture = MockCapture(clock=fake_clock)
    frames = MockFrameSource()
    store = MockStorage()
    storage = StorageController(store, max_recent_duration_seconds=IDLE_TIMER_SECONDS)
    assert storage.initialize()

    recorder = BlockRecorder(capture)
    sampler = ThumbnailSampler(frames, interval=IDLE_TIMER_SECONDS, clock=fake_clock)

    rig = SimpleNamespace()

    async def fire():
        await rig.machine.block_timer_fired()

    timer = BlockTimer(on_fire=fire, duration=IDLE_TIMER_SECONDS)
    callbacks = ServiceCallbacks(recorder, sampler, timer, storage, clock=fake_clock)

    rig.clock = fake_clock
    rig.capture = capture
    rig.frames = frames
    rig.store = store
    rig.storage = storage
    rig.recorder = recorder
    rig.sampler = sampler
    rig.timer = timer
    rig.machine = RecorderMachine(callbacks)

    yield rig

    timer.stop()
    sampler.drain()
    recorder.cleanup()
