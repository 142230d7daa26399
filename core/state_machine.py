"""
Recorder State Machine

Sequences block recording: start block -> capture -> stop/rotate -> persist -> repeat.

The machine never performs I/O itself. Capture, thumbnails, the rotation
timer and persistence are reached only through a RecorderCallbacks
implementation, so the machine can be driven in tests without hardware,
timers or storage.

All inputs must be issued from one event loop. Overlapping stops are
prevented by the STOPPING state: any input that arrives while a block is
being finalized sees STOPPING and does nothing.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from recording.interfaces.capture_interface import CaptureResult
from storage.models.session import Session, Thumbnail


class RecorderState(Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    WAITING_FOR_VIDEO = "waiting_for_video"
    RECORDING = "recording"
    STOPPING = "stopping"


@dataclass(frozen=True)
class MachineState:
    """
    Immutable snapshot of the machine state.

    Only RECORDING carries a block_start. Two RECORDING snapshots with
    different block_start values are different states.
    """

    type: RecorderState
    block_start: Optional[float] = None

    def __str__(self) -> str:
        if self.block_start is None:
            return self.type.value
        return f"{self.type.value}({self.block_start:.3f})"


class RecorderCallbacks(ABC):
    """
    Side effects the machine asks for.

    Implemented by the service (ServiceCallbacks) and by test doubles.
    """

    @abstractmethod
    def on_start_recording(self) -> None:
        """Start capturing (may raise)"""

    @abstractmethod
    async def on_stop_recording(self) -> Optional[CaptureResult]:
        """Stop capturing and return the block media, or None"""

    @abstractmethod
    def on_start_thumbnails(self, block_start: float) -> None:
        """Begin sampling preview frames for this block"""

    @abstractmethod
    def on_stop_thumbnails(self) -> List[Thumbnail]:
        """Stop sampling and hand over the samples"""

    @abstractmethod
    def on_start_block_timer(self) -> None:
        """Arm the rotation timer"""

    @abstractmethod
    def on_stop_block_timer(self) -> None:
        """Cancel the rotation timer"""

    @abstractmethod
    async def on_save_block(
        self,
        result: CaptureResult,
        thumbnails: List[Thumbnail],
        block_start: float,
    ) -> Optional[Session]:
        """Persist a finished block"""

    def on_state_change(self, state: MachineState) -> None:
        """Observe state changes (optional)"""

    def now(self) -> float:
        """Clock, epoch seconds"""
        return time.time()


class RecorderMachine:
    """
    Central state machine for block recording.

    Usage:
        machine = RecorderMachine(callbacks)
        machine.enable()
        machine.storage_ready()
        machine.video_ready()          # -> recording
        await machine.block_timer_fired()   # rotate
        session = await machine.stop_current_block()
    """

    def __init__(self, callbacks: RecorderCallbacks):
        self.logger = logging.getLogger(__name__)
        self.callbacks = callbacks

        self._state = MachineState(RecorderState.IDLE)

        # Readiness flags
        self._enabled = False
        self._video_ready = False
        self._storage_ready = False

        # Counters for status display
        self.blocks_started = 0
        self.sessions_saved = 0

        # Released when the block stop in flight finishes
        self._settled: Optional[asyncio.Event] = None

        self.logger.info("Recorder machine initialized in IDLE state")

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def state(self) -> MachineState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state.type == RecorderState.RECORDING

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    async def wait_until_settled(self) -> None:
        """Wait for an in-flight block stop (and its save) to finish"""
        while self._settled is not None and not self._settled.is_set():
            await self._settled.wait()

    def _all_ready(self) -> bool:
        return self._enabled and self._video_ready and self._storage_ready

    def get_status(self) -> Dict[str, Any]:
        """Get detailed status information for debugging/monitoring"""
        block_start = self._state.block_start
        return {
            "state": self._state.type.value,
            "block_start": block_start,
            "elapsed_seconds": (
                self.callbacks.now() - block_start if block_start is not None else 0.0
            ),
            "enabled": self._enabled,
            "video_ready": self._video_ready,
            "storage_ready": self._storage_ready,
            "blocks_started": self.blocks_started,
            "sessions_saved": self.sessions_saved,
        }

    # =========================================================================
    # INPUTS
    # =========================================================================

    def enable(self) -> None:
        if self._enabled:
            return
        self._enabled = True
        self._try_transition("enabled")

    async def disable(self) -> None:
        if not self._enabled:
            return
        self._enabled = False

        if self.is_recording:
            await self.stop_current_block()
        # A stop already in flight settles in IDLE by itself
        self._try_transition("disabled")

    def storage_ready(self) -> None:
        if self._storage_ready:
            return
        self._storage_ready = True
        self._try_transition("storage ready")

    async def storage_failed(self) -> None:
        self._storage_ready = False
        if self._state.type == RecorderState.STOPPING:
            return
        if self.is_recording:
            self.logger.warning("Storage failed while recording, stopping block")
            await self.stop_current_block()
            return
        self._set_state(MachineState(RecorderState.IDLE), "storage failed")

    def video_ready(self) -> None:
        if self._video_ready:
            return
        self._video_ready = True
        self._try_transition("video ready")

    async def video_not_ready(self) -> None:
        if not self._video_ready:
            return
        self._video_ready = False

        if self.is_recording:
            await self.stop_current_block()
        else:
            self._try_transition("video lost")

    def resume(self) -> None:
        """Start a new block after a manual stop left the machine waiting"""
        if self._state.type != RecorderState.WAITING_FOR_VIDEO:
            return
        self._try_transition("resumed")

    async def block_timer_fired(self) -> None:
        if not self.is_recording:
            self.logger.debug(f"Block timer fired in state {self._state}, ignoring")
            return

        await self.stop_current_block()

        if self._all_ready() and self._state.type != RecorderState.RECORDING:
            self._start_recording_block("rotation")

    async def stop_current_block(self) -> Optional[Session]:
        """
        Finish the current block and persist it.

        Returns:
            The saved Session, or None if not recording or nothing was saved
        """
        if not self.is_recording:
            return None

        block_start = self._state.block_start
        assert block_start is not None
        self._set_state(MachineState(RecorderState.STOPPING), "stopping block")
        self._settled = asyncio.Event()

        try:
            return await self._finish_block(block_start)
        finally:
            self._settled.set()

    async def _finish_block(self, block_start: float) -> Optional[Session]:
        """Stop side effects, persist, then leave STOPPING"""
        self._call_safely("stop block timer", self.callbacks.on_stop_block_timer)
        thumbnails = self._call_safely("stop thumbnails", self.callbacks.on_stop_thumbnails)

        try:
            result = await self.callbacks.on_stop_recording()
        except Exception as e:
            self.logger.error(f"Error stopping recording: {e}")
            result = None

        session = None
        if result is not None and result.size > 0:
            try:
                session = await self.callbacks.on_save_block(
                    result,
                    thumbnails or [],
                    block_start,
                )
            except Exception as e:
                self.logger.error(f"Error saving block: {e}")
        else:
            self.logger.info("Block produced no media, nothing to save")

        if session is not None:
            self.sessions_saved += 1

        if self._all_ready():
            self._set_state(MachineState(RecorderState.WAITING_FOR_VIDEO), "block stopped")
        else:
            self._set_state(MachineState(RecorderState.IDLE), "block stopped")

        return session

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def _try_transition(self, reason: str) -> None:
        """Move to whatever state the current flags call for"""
        current = self._state.type

        # The stop in flight decides where we land
        if current == RecorderState.STOPPING:
            return

        if not self._enabled:
            self._set_state(MachineState(RecorderState.IDLE), reason)
        elif not self._storage_ready:
            self._set_state(MachineState(RecorderState.INITIALIZING), reason)
        elif not self._video_ready:
            self._set_state(MachineState(RecorderState.WAITING_FOR_VIDEO), reason)
        elif current != RecorderState.RECORDING:
            self._start_recording_block(reason)

    def _start_recording_block(self, reason: str) -> None:
        block_start = self.callbacks.now()
        self.blocks_started += 1
        self._set_state(MachineState(RecorderState.RECORDING, block_start), reason)

        # Start failures propagate to whoever issued the input, but the
        # sampler and timer still run so the block ends and rotates
        try:
            self.callbacks.on_start_recording()
        finally:
            self.callbacks.on_start_thumbnails(block_start)
            self.callbacks.on_start_block_timer()

    def _set_state(self, new_state: MachineState, reason: str = "") -> None:
        """
        Transition to a new state with logging and callback notification
        """
        if new_state == self._state:
            self.logger.debug(f"Already in state {new_state}")
            return

        old_state = self._state
        self._state = new_state

        log_msg = f"State transition: {old_state} -> {new_state}"
        if reason:
            log_msg += f" ({reason})"
        self.logger.info(log_msg)

        try:
            self.callbacks.on_state_change(new_state)
        except Exception as e:
            self.logger.error(f"Error in state change callback: {e}")

    def _call_safely(self, what: str, func: Callable[[], Any]) -> Any:
        try:
            return func()
        except Exception as e:
            self.logger.error(f"Error during {what}: {e}")
            return None
