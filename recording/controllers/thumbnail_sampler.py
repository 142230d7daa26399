"""
Thumbnail Sampler

Periodically grabs preview frames while a block records.

Each sample is tagged with its offset from the block start, so the
thumbnails line up with the recorded media.
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional

from config.settings import THUMBNAIL_INTERVAL_SECONDS
from recording.interfaces.frame_source_interface import FrameSourceInterface
from storage.models.session import Thumbnail


class ThumbnailSampler:
    """
    Samples frames from a FrameSourceInterface on a fixed interval.

    Usage:
        sampler = ThumbnailSampler(frame_source)
        sampler.start(block_start)      # first sample immediately
        ...
        thumbnails = sampler.drain()    # stop and take everything
    """

    def __init__(
        self,
        frame_source: FrameSourceInterface,
        interval: float = THUMBNAIL_INTERVAL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            frame_source: Where frames come from
            interval: Seconds between samples
            clock: Time source in epoch seconds (default: time.time)
        """
        self.logger = logging.getLogger(__name__)
        self.frame_source = frame_source
        self.interval = interval
        self._clock = clock or time.time

        self._thumbnails: List[Thumbnail] = []
        self._task: Optional[asyncio.Task] = None
        self._block_start: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self._task is not None

    @property
    def current_thumbnails(self) -> List[Thumbnail]:
        """Copy of the samples taken so far in this cycle"""
        return list(self._thumbnails)

    def start(self, block_start: float) -> None:
        """
        Begin a sampling cycle for a block.

        Resets the buffer and captures one sample right away.
        """
        if self.is_active:
            discarded = self.drain()
            self.logger.warning(
                f"Sampler restarted while active, dropped {len(discarded)} samples",
            )

        self._thumbnails = []
        self._block_start = block_start
        self.capture_now(block_start)
        self._task = asyncio.get_running_loop().create_task(self._run())
        self.logger.debug(f"Thumbnail sampling started (every {self.interval}s)")

    def capture_now(self, block_start: float) -> Optional[Thumbnail]:
        """
        Take one sample.

        Returns:
            The Thumbnail appended, or None if the frame was not readable
        """
        try:
            image = self.frame_source.capture_frame()
        except Exception as e:
            self.logger.warning(f"Thumbnail capture failed: {e}")
            return None

        if not image:
            self.logger.debug("Frame not readable yet, skipping sample")
            return None

        thumbnail = Thumbnail(time=self._clock() - block_start, image=image)
        self._thumbnails.append(thumbnail)
        self.logger.debug(f"Thumbnail captured at {thumbnail.time:.1f}s")
        return thumbnail

    def drain(self) -> List[Thumbnail]:
        """
        Stop sampling and hand over the buffer.

        Destructive: a second drain returns an empty list.
        """
        if self._task is not None:
            self._task.cancel()
            self._task = None

        thumbnails = self._thumbnails
        self._thumbnails = []
        self._block_start = None

        self.logger.debug(f"Thumbnail sampler drained ({len(thumbnails)} samples)")
        return thumbnails

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self._block_start is None:
                return
            self.capture_now(self._block_start)
