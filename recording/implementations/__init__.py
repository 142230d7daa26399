"""
Recording Implementations Package

Exposes concrete implementations of recording interfaces.
"""

from recording.implementations.ffmpeg_capture import FFmpegCapture
from recording.implementations.mock_capture import MockCapture
from recording.implementations.mock_frame_source import MockFrameSource
from recording.implementations.snapshot_frame_source import SnapshotFrameSource

# Public API
__all__ = [
    "FFmpegCapture",
    "MockCapture",
    "MockFrameSource",
    "SnapshotFrameSource",
]
