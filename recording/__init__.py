"""
Recording Module

Block capture, rotation timing, and thumbnail sampling.

Provides automatic detection and graceful fallback between real FFmpeg
capture and mock implementations for testing.

Public API:
    - RecordingFactory: Factory for creating capture implementations
    - create_capture: Quick capture creation with auto-detection
    - BlockRecorder: Capture lifecycle for one block at a time
    - BlockTimer: Single-shot rotation timer
    - ThumbnailSampler: Periodic preview frames
    - CaptureInterface / CaptureResult: Capture contract
    - CaptureError: Custom exceptions
    - RecordingState: State enumeration

Usage:
    from recording import BlockRecorder, ThumbnailSampler, RecordingFactory

    recorder = BlockRecorder()
    sampler = ThumbnailSampler(RecordingFactory.create_frame_source(recorder.capture))

    recorder.start_recording()
    sampler.start(block_start)
    ...
    thumbnails = sampler.drain()
    result = await recorder.stop_recording()
"""

from recording.constants import RecordingState
from recording.controllers.block_recorder import BlockRecorder
from recording.controllers.block_timer import BlockTimer
from recording.controllers.thumbnail_sampler import ThumbnailSampler
from recording.factory import RecordingFactory, create_capture
from recording.interfaces.capture_interface import (
    CaptureError,
    CaptureInterface,
    CaptureResult,
)

__all__ = [
    "BlockRecorder",
    "BlockTimer",
    "CaptureError",
    "CaptureInterface",
    "CaptureResult",
    "RecordingFactory",
    "RecordingState",
    "ThumbnailSampler",
    "create_capture",
]
