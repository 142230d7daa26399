"""
Snapshot Frame Source

Reads the rolling JPEG snapshot that FFmpegCapture keeps up to date
next to the block recording.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from recording.interfaces.frame_source_interface import FrameSourceInterface

# A JPEG starts with SOI marker; anything else is a half-written file
JPEG_SOI = b"\xff\xd8"


class SnapshotFrameSource(FrameSourceInterface):
    """
    Frame source backed by a snapshot file on disk.

    The snapshot path is resolved on every call because each block
    gets a fresh capture work directory.

    Usage:
        source = SnapshotFrameSource(capture.get_snapshot_file)
        frame = source.capture_frame()
    """

    def __init__(self, snapshot_path_provider: Callable[[], Optional[Path]]):
        """
        Args:
            snapshot_path_provider: Returns the current snapshot path,
                or None when no capture is running
        """
        self.logger = logging.getLogger(__name__)
        self._snapshot_path_provider = snapshot_path_provider

    def capture_frame(self) -> Optional[bytes]:
        """Return the latest snapshot bytes, or None if not readable"""
        path = self._snapshot_path_provider()
        if path is None or not path.exists():
            return None

        try:
            data = path.read_bytes()
        except OSError as e:
            self.logger.debug(f"Snapshot not readable: {e}")
            return None

        # ffmpeg may be mid-write
        if not data.startswith(JPEG_SOI):
            return None

        return data
