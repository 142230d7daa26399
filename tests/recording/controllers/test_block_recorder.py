"""
Block Recorder Tests

Tests for BlockRecorder showing:
- Start/stop lifecycle
- Availability and start failures
- Stop failures reported as lost recordings

To run:
    pytest tests/recording/controllers/test_block_recorder.py -v
"""

import pytest

from recording.interfaces.capture_interface import CaptureUnavailableError


@pytest.mark.unit
async def test_start_stop_returns_result(block_recorder, fake_clock):
    """
    Test a full block.

    Should:
    - Report recording while active
    - Return the measured duration and media
    - Count the block
    """
    block_recorder.start_recording()
    assert block_recorder.is_recording()
    assert block_recorder.get_state() == "recording"

    fake_clock.advance(5)
    result = await block_recorder.stop_recording()

    assert result is not None
    assert result.duration_seconds == pytest.approx(5.0)
    assert result.size > 0
    assert block_recorder.blocks_recorded == 1
    assert block_recorder.get_state() == "inactive"


@pytest.mark.unit
async def test_stop_when_not_recording(block_recorder):
    """Test stop without start returns None."""
    assert await block_recorder.stop_recording() is None
    assert block_recorder.blocks_recorded == 0


@pytest.mark.unit
def test_start_when_unavailable(block_recorder, mock_capture):
    """Test start raises when the camera is missing."""
    mock_capture.set_available(False)

    assert block_recorder.is_ready() is False
    with pytest.raises(CaptureUnavailableError):
        block_recorder.start_recording()
    assert block_recorder.error == "Capture source not available"


@pytest.mark.unit
def test_start_failure_propagates(block_recorder, mock_capture):
    """Test a capture start failure reaches the caller."""
    mock_capture.simulate_start_failure()

    with pytest.raises(CaptureUnavailableError):
        block_recorder.start_recording()
    assert block_recorder.is_recording() is False
    assert block_recorder.error is not None


@pytest.mark.unit
async def test_stop_failure_returns_none(block_recorder, mock_capture, caplog):
    """Test a capture that fails while finalizing yields no result."""
    block_recorder.start_recording()
    mock_capture.simulate_stop_failure()

    assert await block_recorder.stop_recording() is None
    assert "recording may have been lost" in caplog.text
    assert block_recorder.error is not None


@pytest.mark.unit
async def test_successful_start_clears_error(block_recorder, mock_capture):
    """Test error is reset by the next successful start."""
    mock_capture.simulate_start_failure()
    with pytest.raises(CaptureUnavailableError):
        block_recorder.start_recording()

    mock_capture.reset_test_config()
    block_recorder.start_recording()

    assert block_recorder.error is None
