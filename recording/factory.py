"""
Recording Factory

Factory pattern for creating capture and frame source implementations.
Automatically selects real or mock capture based on availability.

Single place to decide implementation; callers only see the interfaces.
"""

import logging
from pathlib import Path
from typing import Callable, Literal, Optional

from recording.implementations.ffmpeg_capture import FFmpegCapture
from recording.implementations.mock_capture import MockCapture
from recording.implementations.mock_frame_source import MockFrameSource
from recording.implementations.snapshot_frame_source import SnapshotFrameSource
from recording.interfaces.capture_interface import CaptureInterface
from recording.interfaces.frame_source_interface import FrameSourceInterface

# Type alias for better type hints
CaptureMode = Literal["auto", "real", "mock"]


class RecordingFactory:
    """
    Factory for creating capture implementations.

    Usage:
        # Auto-detect (uses FFmpeg if available, mock otherwise)
        capture = RecordingFactory.create_capture()

        # Force mock mode (useful for testing)
        capture = RecordingFactory.create_capture(mode="mock")

        # Force real capture (raises error if not available)
        capture = RecordingFactory.create_capture(mode="real")

        # Thumbnail source that matches the capture
        frames = RecordingFactory.create_frame_source(capture)
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_capture(
        cls,
        mode: CaptureMode = "auto",
        clock: Optional[Callable[[], float]] = None,
        work_root: Optional[Path] = None,
    ) -> CaptureInterface:
        """
        Create a capture instance.

        Args:
            mode: "auto" (detect), "real" (force FFmpeg), "mock" (force mock)
            clock: Time source for mock capture (only used for mocks)
            work_root: Scratch directory root for FFmpeg capture

        Returns:
            CaptureInterface implementation

        Raises:
            RuntimeError: If mode="real" but FFmpeg or camera not available
        """
        if mode == "mock":
            cls._logger.info("Creating Mock Capture")
            return MockCapture(clock=clock)

        if mode == "real":
            capture = FFmpegCapture(work_root=work_root)
            if not capture.is_available():
                raise RuntimeError(
                    "Real capture requested but FFmpeg or camera not available",
                )
            cls._logger.info("Creating FFmpeg Capture (forced)")
            return capture

        # mode == "auto" - try real first, fall back to mock
        capture = FFmpegCapture(work_root=work_root)
        if capture.is_available():
            cls._logger.info("Creating FFmpeg Capture (auto-detected)")
            return capture

        cls._logger.warning("FFmpeg or camera not available, using Mock Capture")
        return MockCapture(clock=clock)

    @classmethod
    def create_frame_source(cls, capture: CaptureInterface) -> FrameSourceInterface:
        """
        Create the frame source that pairs with a capture.

        FFmpeg capture writes a rolling snapshot file; anything else gets
        a mock frame source.
        """
        if isinstance(capture, FFmpegCapture):
            cls._logger.info("Creating Snapshot Frame Source")
            return SnapshotFrameSource(capture.get_snapshot_file)

        cls._logger.info("Creating Mock Frame Source")
        return MockFrameSource()

    @classmethod
    def is_real_capture_available(cls) -> dict[str, bool]:
        """
        Check if real capture is available.

        Useful for diagnostics and configuration display.

        Returns:
            Dictionary with availability status:
            {
                'ffmpeg': True/False,
                'camera': True/False
            }
        """
        capture = FFmpegCapture()
        return {
            "ffmpeg": capture.is_ffmpeg_installed(),
            "camera": capture.is_camera_present(),
        }


def create_capture(force_mock: bool = False) -> CaptureInterface:
    """
    Quick capture creation with simple options.

    Example:
        capture = create_capture()
        capture = create_capture(force_mock=True)
    """
    mode: CaptureMode = "mock" if force_mock else "auto"
    return RecordingFactory.create_capture(mode=mode)
