"""
Block Timer

Single-shot asyncio timer that ends a recording block after a fixed duration.

Armed on every block start, cancelled whenever the block ends. It never
reschedules itself: the state machine re-arms it when the next block starts.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from config.settings import BLOCK_DURATION_SECONDS


class BlockTimer:
    """
    One pending timer at a time.

    Usage:
        timer = BlockTimer(on_fire=machine.block_timer_fired)
        timer.start()   # fires after BLOCK_DURATION_SECONDS
        timer.stop()    # cancel (safe when idle)
    """

    def __init__(
        self,
        on_fire: Callable[[], Awaitable[None]],
        duration: float = BLOCK_DURATION_SECONDS,
    ):
        """
        Args:
            on_fire: Coroutine function awaited when the block duration elapses
            duration: Block length in seconds
        """
        self.logger = logging.getLogger(__name__)
        self.duration = duration
        self._on_fire = on_fire
        self._task: Optional[asyncio.Task] = None
        self.fire_count = 0

    @property
    def is_armed(self) -> bool:
        """Check if a timer is pending"""
        return self._task is not None

    def start(self) -> None:
        """Cancel any pending timer and arm a new one"""
        self.stop()
        self._task = asyncio.get_running_loop().create_task(self._run())
        self.logger.debug(f"Block timer armed ({self.duration}s)")

    def stop(self) -> None:
        """Cancel the pending timer, if any"""
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        self.logger.debug("Block timer cancelled")

    async def _run(self) -> None:
        await asyncio.sleep(self.duration)

        # Cleared before firing so a stop() from inside the callback
        # cannot cancel the running rotation
        self._task = None
        self.fire_count += 1
        self.logger.info(f"Block timer fired after {self.duration}s")

        try:
            await self._on_fire()
        except Exception as e:
            self.logger.error(f"Error in block timer callback: {e}", exc_info=True)
