"""
Block Recorder

High-level wrapper around a capture implementation.
Handles availability checks, error bookkeeping, and logging so the
state machine only sees start/stop.

SOLID Principles:
- Single Responsibility: Only manages capture lifecycle for one block
- Dependency Inversion: Depends on CaptureInterface, not FFmpeg
"""

import logging
from typing import Optional

from recording.constants import RecordingState, format_duration
from recording.factory import RecordingFactory
from recording.interfaces.capture_interface import (
    CaptureError,
    CaptureInterface,
    CaptureResult,
    CaptureUnavailableError,
)


class BlockRecorder:
    """
    Records one block at a time.

    Usage:
        recorder = BlockRecorder()            # auto-detects FFmpeg vs mock
        recorder.start_recording()
        result = await recorder.stop_recording()
    """

    def __init__(self, capture: Optional[CaptureInterface] = None):
        """
        Args:
            capture: Capture implementation (created by factory if None)
        """
        self.logger = logging.getLogger(__name__)
        self.capture = capture or RecordingFactory.create_capture()

        # Last failure, for status display
        self.error: Optional[str] = None
        self.blocks_recorded = 0

        self.logger.info(f"Block Recorder initialized ({type(self.capture).__name__})")

    def is_ready(self) -> bool:
        """Check if the capture source can be used"""
        return self.capture.is_available()

    def get_state(self) -> str:
        """Capture state as a plain string: 'inactive' or 'recording'"""
        return self.capture.state().value

    def is_recording(self) -> bool:
        return self.capture.state() == RecordingState.RECORDING

    def start_recording(self) -> None:
        """
        Start capturing a block.

        Raises:
            CaptureUnavailableError: If the capture cannot be started
        """
        if not self.capture.is_available():
            self.error = "Capture source not available"
            raise CaptureUnavailableError(self.error)

        try:
            self.capture.start()
        except CaptureUnavailableError as e:
            self.error = str(e)
            raise
        except CaptureError as e:
            self.error = str(e)
            raise CaptureUnavailableError(f"Failed to start capture: {e}") from e

        self.error = None
        self.logger.info("Block recording started")

    async def stop_recording(self) -> Optional[CaptureResult]:
        """
        Stop the current block and return its media.

        Always delegates to the capture, so a process that died mid-block
        is still reaped and whatever it wrote is returned.

        Returns:
            CaptureResult, or None if nothing was recording or the
            capture failed while finalizing
        """
        try:
            result = await self.capture.stop()
        except CaptureError as e:
            self.error = str(e)
            self.logger.error(f"Failed to stop capture, recording may have been lost: {e}")
            return None

        if result is None:
            self.logger.debug("Not recording, nothing to stop")
            return None

        self.blocks_recorded += 1
        self.logger.info(
            f"Block recording stopped ({format_duration(result.duration_seconds)}, "
            f"{result.size} bytes)",
        )
        return result

    def cleanup(self) -> None:
        """Release the capture (never raises)"""
        self.logger.info("Cleaning up Block Recorder")
        try:
            self.capture.cleanup()
        except Exception as e:
            self.logger.error(f"Error during capture cleanup: {e}")
