"""
Capture Interface

Abstract interface for block capture implementations.
Defines the contract that any capture system must follow.

High-level code (BlockRecorder) depends on this abstraction, not on
FFmpeg directly, so MockCapture can stand in during tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from recording.constants import RecordingState


@dataclass(frozen=True)
class CaptureResult:
    """
    Finished capture of one block.

    duration_ms is measured by the capture, not estimated from the timer.
    """

    data: bytes
    duration_ms: float

    @property
    def size(self) -> int:
        """Payload size in bytes"""
        return len(self.data)

    @property
    def is_empty(self) -> bool:
        """True when the capture produced no media"""
        return len(self.data) == 0

    @property
    def duration_seconds(self) -> float:
        """Measured duration in seconds"""
        return self.duration_ms / 1000.0


class CaptureInterface(ABC):
    """
    Abstract base class for capture systems.

    One instance captures at most one block at a time:
    start() -> ... -> await stop() -> start() -> ...
    """

    @abstractmethod
    def start(self) -> None:
        """
        Start capturing a new block.

        NON-BLOCKING - returns once capture is running.

        Raises:
            CaptureError: If the capture cannot be started
        """

    @abstractmethod
    async def stop(self) -> Optional[CaptureResult]:
        """
        Stop the current capture and hand back its media.

        Waits for the capture to finalize. Returns None when nothing
        was being captured.

        Raises:
            CaptureError: If the capture failed while finalizing
        """

    @abstractmethod
    def state(self) -> RecordingState:
        """Current capture state (INACTIVE or RECORDING)"""

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if the capture source can be used right now.

        Should check that the capture software is installed and
        the camera device is present.
        """

    @abstractmethod
    def cleanup(self) -> None:
        """
        Release resources and stop any active capture.

        This should never raise exceptions.
        """


class CaptureError(Exception):
    """
    Exception raised for capture errors.

    Makes it easy to catch capture-specific errors:
        except CaptureError as e:
            logger.error(f"Capture failed: {e}")
    """


class CaptureUnavailableError(CaptureError):
    """Capture source cannot start or stop (camera missing, busy, etc.)"""


class CaptureProcessError(CaptureError):
    """Error in the capture process (FFmpeg crashed, etc.)"""
