"""
Mock Capture Implementation

Simulated block capture for testing without real camera/FFmpeg.

This is a "Fake" (test double) - it has working logic but no real hardware.
Payload bytes and duration are derived from an injectable clock so tests
can control exactly how long a block "recorded".
"""

import logging
import time
from typing import Callable, List, Optional

from recording.constants import RecordingState
from recording.interfaces.capture_interface import (
    CaptureInterface,
    CaptureResult,
    CaptureUnavailableError,
)

# Fake encoder output rate used to size the payload
MOCK_BYTES_PER_SECOND = 1024

# Minimal MP4 header so the payload looks like a video file
MOCK_HEADER = b"\x00\x00\x00\x20ftypmp42"


class MockCapture(CaptureInterface):
    """
    Mock capture for testing.

    Usage:
        capture = MockCapture(clock=fake_clock)
        capture.start()
        fake_clock.advance(5)
        result = await capture.stop()   # ~5000 ms of fake media
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Initialize mock capture.

        Args:
            clock: Time source in seconds (default: time.time)
        """
        self.logger = logging.getLogger(__name__)
        self._clock = clock or time.time

        # State tracking
        self._state = RecordingState.INACTIVE
        self._start_time: Optional[float] = None
        self._available = True

        # Configuration for test scenarios
        self._should_fail_start = False
        self._should_fail_stop = False
        self._should_return_empty = False

        # Track operations for test verification
        self.start_count = 0
        self.stop_count = 0
        self.results: List[CaptureResult] = []

        self.logger.info("[MOCK] Capture initialized")

    def start(self) -> None:
        """Simulate starting a capture"""
        if self._state == RecordingState.RECORDING:
            raise CaptureUnavailableError("Already capturing")

        if self._should_fail_start:
            self.logger.error("[MOCK] Simulated start failure")
            raise CaptureUnavailableError("Simulated camera failure")

        self._state = RecordingState.RECORDING
        self._start_time = self._clock()
        self.start_count += 1

        self.logger.info("[MOCK] Capture started")

    async def stop(self) -> Optional[CaptureResult]:
        """Simulate finalizing a capture"""
        if self._state != RecordingState.RECORDING:
            self.logger.warning("[MOCK] Not capturing")
            return None

        self._state = RecordingState.INACTIVE
        self.stop_count += 1
        start_time = self._start_time
        self._start_time = None

        if self._should_fail_stop:
            self.logger.error("[MOCK] Simulated stop failure")
            raise CaptureUnavailableError("Simulated recorder failure")

        duration_s = max(0.0, self._clock() - start_time)

        if self._should_return_empty:
            data = b""
        else:
            data = MOCK_HEADER + b"\x00" * int(duration_s * MOCK_BYTES_PER_SECOND)

        result = CaptureResult(data=data, duration_ms=duration_s * 1000.0)
        self.results.append(result)

        self.logger.info(
            f"[MOCK] Capture stopped ({duration_s:.1f}s, {result.size} bytes)",
        )
        return result

    def state(self) -> RecordingState:
        """Current simulated state"""
        return self._state

    def is_available(self) -> bool:
        """Mock capture is available unless a test says otherwise"""
        return self._available

    def cleanup(self) -> None:
        """Drop any active capture without producing a result"""
        self.logger.debug("[MOCK] Cleanup")
        self._state = RecordingState.INACTIVE
        self._start_time = None

    # =========================================================================
    # TESTING HELPER METHODS (not part of CaptureInterface)
    # =========================================================================

    def set_available(self, available: bool) -> None:
        """Simulate the camera appearing or disappearing"""
        self._available = available

    def simulate_start_failure(self) -> None:
        """Configure mock to fail on next start() call"""
        self._should_fail_start = True
        self.logger.debug("[MOCK] Configured to fail on start")

    def simulate_stop_failure(self) -> None:
        """Configure mock to raise from stop()"""
        self._should_fail_stop = True
        self.logger.debug("[MOCK] Configured to fail on stop")

    def simulate_empty_result(self) -> None:
        """Configure mock to return a zero-byte payload"""
        self._should_return_empty = True
        self.logger.debug("[MOCK] Configured to return empty payload")

    def reset_test_config(self) -> None:
        """Reset test configuration to normal operation"""
        self._should_fail_start = False
        self._should_fail_stop = False
        self._should_return_empty = False
        self._available = True
        self.logger.debug("[MOCK] Test configuration reset")
