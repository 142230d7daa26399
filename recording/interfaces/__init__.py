"""
Recording Interfaces Package

Exposes abstract interfaces for recording components.
"""

from recording.interfaces.capture_interface import (
    CaptureError,
    CaptureInterface,
    CaptureProcessError,
    CaptureResult,
    CaptureUnavailableError,
)
from recording.interfaces.frame_source_interface import FrameSourceInterface

# Public API
__all__ = [
    # Exceptions
    "CaptureError",
    # Interfaces
    "CaptureInterface",
    "CaptureProcessError",
    "CaptureResult",
    "CaptureUnavailableError",
    "FrameSourceInterface",
]
