"""
Shared Test Configuration and Fixtures

Fixtures used by more than one test package.

To run all tests:
    pip install -e ".[test]"
    pytest tests/
"""

import pytest


class FakeClock:
    """
    Manually advanced clock in epoch seconds.

    Callable, so it can be passed anywhere a time.time-like clock is taken.
    """

    def __init__(self, start: float = 1_700_000_000.0):
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


# =============================================================================
# CLOCK FIXTURES
# =============================================================================


@pytest.fixture
def fake_clock():
    """
    Provide a FakeClock starting at a fixed epoch.

    Usage:
        def test_duration(fake_clock):
            capture = MockCapture(clock=fake_clock)
            capture.start()
            fake_clock.advance(5)
    """
    return FakeClock()


# =============================================================================
# CALLBACK TRACKING FIXTURES
# =============================================================================


@pytest.fixture
def callback_tracker():
    """
    Provide helper for tracking callback calls.

    Usage:
        def test_callback(storage_controller, callback_tracker):
            storage_controller.on_sessions_changed = callback_tracker.track
            # ... trigger change ...
            assert callback_tracker.was_called()
    """

    class CallbackTracker:
        def __init__(self):
            self.calls = []

        def track(self, *args, **kwargs):
            """Record a callback invocation"""
            self.calls.append({"args": args, "kwargs": kwargs})

        def was_called(self) -> bool:
            """Check if callback was called"""
            return len(self.calls) > 0

        def get_call_count(self) -> int:
            """Get number of times callback was called"""
            return len(self.calls)

        def get_last_call(self):
            """Get arguments from last call"""
            return self.calls[-1] if self.calls else None

        def reset(self):
            """Clear call history"""
            self.calls.clear()

    return CallbackTracker()


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """
    Configure pytest with custom markers.
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "unit_integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
    config.addinivalue_line("markers", "requires_ffmpeg: Tests requiring FFmpeg")
