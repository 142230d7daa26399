"""
Mock Frame Source

Fake preview surface for thumbnail sampler tests.
"""

import logging
from typing import Optional

from recording.interfaces.frame_source_interface import FrameSourceInterface


class MockFrameSource(FrameSourceInterface):
    """
    Produces numbered fake JPEG frames.

    Set readable=False to simulate a surface that is not ready yet,
    or fail_next() to make the next grab raise.
    """

    def __init__(self, readable: bool = True):
        self.logger = logging.getLogger(__name__)
        self.readable = readable
        self.frames_captured = 0
        self._fail_next = False

    def capture_frame(self) -> Optional[bytes]:
        if self._fail_next:
            self._fail_next = False
            raise RuntimeError("Simulated frame grab failure")

        if not self.readable:
            return None

        self.frames_captured += 1
        return b"\xff\xd8\xff\xe0" + f"frame-{self.frames_captured}".encode()

    def fail_next(self) -> None:
        self._fail_next = True
