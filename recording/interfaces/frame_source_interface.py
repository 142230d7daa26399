"""
Frame Source Interface

Contract for grabbing a single preview frame from the live capture surface.
"""

from abc import ABC, abstractmethod
from typing import Optional


class FrameSourceInterface(ABC):
    """
    Source of preview frames for thumbnail sampling.

    capture_frame() must be cheap and non-blocking: it is called from the
    event loop on every sampling tick.
    """

    @abstractmethod
    def capture_frame(self) -> Optional[bytes]:
        """
        Grab the current frame as encoded image bytes (JPEG).

        Returns:
            Image bytes, or None if the surface is not readable yet
        """
