"""
Recording Controllers Package

High-level controllers that drive a recording block: capture, rotation
timer, and thumbnail sampling.
"""

from recording.controllers.block_recorder import BlockRecorder
from recording.controllers.block_timer import BlockTimer
from recording.controllers.thumbnail_sampler import ThumbnailSampler

# Public API
__all__ = [
    "BlockRecorder",
    "BlockTimer",
    "ThumbnailSampler",
]
