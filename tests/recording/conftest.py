"""
Recording Test Configuration and Fixtures

Shared fixtures for recording module tests.
"""

import pytest

from recording.controllers.block_recorder import BlockRecorder
from recording.implementations.mock_capture import MockCapture
from recording.implementations.mock_frame_source import MockFrameSource

# =============================================================================
# CAPTURE FIXTURES
# =============================================================================


@pytest.fixture
def mock_capture(fake_clock):
    """
    Provide MockCapture driven by the fake clock.

    Usage:
        async def test_capture(mock_capture, fake_clock):
            mock_capture.start()
            fake_clock.advance(5)
            result = await mock_capture.stop()
    """
    capture = MockCapture(clock=fake_clock)
    yield capture
    capture.cleanup()


@pytest.fixture
def block_recorder(mock_capture):
    """
    Provide BlockRecorder over the fake-clock mock capture.

    Usage:
        async def test_block(block_recorder):
            block_recorder.start_recording()
    """
    recorder = BlockRecorder(capture=mock_capture)
    yield recorder
    recorder.cleanup()


# =============================================================================
# FRAME SOURCE FIXTURES
# =============================================================================


@pytest.fixture
def frame_source():
    """Provide a readable MockFrameSource"""
    return MockFrameSource()
