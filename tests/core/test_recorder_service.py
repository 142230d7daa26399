"""
Recorder Service Tests

Tests for the service wiring showing:
- Startup: enable, storage init, video monitor
- Remote control commands
- Graceful shutdown saving the active block

Runs fully on mock capture and in-memory storage.

To run:
    pytest tests/core/test_recorder_service.py -v
"""

import asyncio
import logging

import pytest

from core.state_machine import RecorderState
from recorder_service import RecorderService
from storage.config import StorageConfig
from storage.implementations.local_storage import LocalStorage


async def wait_for(predicate, timeout: float = 2.0):
    """Yield to the loop until predicate() is true"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def service(tmp_path):
    """Provide a RecorderService on mocks with a private control file"""
    return RecorderService(
        capture_mode="mock",
        storage_mode="mock",
        storage_config=StorageConfig(config_path=tmp_path / "storage.yaml"),
        control_file=tmp_path / "control.cmd",
    )


@pytest.fixture
def local_service(tmp_path):
    """Provide a RecorderService on mock capture and SQLite storage"""
    config = StorageConfig(config_path=tmp_path / "storage.yaml")
    config.set("storage_base_path", str(tmp_path / "data"), save=False)
    return RecorderService(
        capture_mode="mock",
        storage_mode="real",
        storage_config=config,
        control_file=tmp_path / "control.cmd",
    )

@pytest.fixture
async def running_service(service):
    """Provide a started service that is recording"""
    await service.start()
    await wait_for(lambda: service.machine.is_recording)
    yield service
    await service.shutdown()


def send(service, command: str) -> None:
    service.control_file.write_text(command)


# =============================================================================
# STARTUP TESTS
# =============================================================================


@pytest.mark.unit_integration
async def test_start_begins_recording(service):
    """
    Test service startup.

    Should:
    - Enable the machine
    - Report storage ready
    - Start recording once the video monitor sees the camera
    """
    await service.start()
    try:
        await wait_for(lambda: service.machine.is_recording)

        status = service.machine.get_status()
        assert status["enabled"] is True
        assert status["storage_ready"] is True
        assert service.recorder.is_recording()
        assert service.timer.is_armed
    finally:
        await service.shutdown()


@pytest.mark.unit_integration
async def test_storage_failure_prevents_recording(service):
    """Test failing storage init never starts a block."""
    service.storage.storage.simulate_init_failure()

    await service.start()
    try:
        await asyncio.sleep(0.05)
        assert service.machine.is_recording is False
        assert service.machine.get_status()["storage_ready"] is False
        assert service.recorder.is_recording() is False
    finally:
        await service.shutdown()


@pytest.mark.unit_integration
async def test_camera_loss_stops_block(running_service):
    """Test the video monitor stops the block when the camera disappears."""
    running_service.recorder.capture.set_available(False)

    await wait_for(lambda: running_service.machine.state.type == RecorderState.IDLE)

    assert len(running_service.storage.storage.list_all()) == 1


@pytest.mark.unit_integration
async def test_failed_rotation_start_keeps_timer_armed(running_service):
    """
    Test a camera that fails to start on rotation.

    Should:
    - Keep the block timer and sampler running
    - Record again on the next rotation once the camera recovers
    """
    capture = running_service.recorder.capture
    capture.simulate_start_failure()

    await running_service._handle_block_timer()

    assert running_service.machine.is_recording
    assert running_service.timer.is_armed
    assert running_service.sampler.is_active
    assert running_service.recorder.is_recording() is False

    capture.reset_test_config()
    await running_service._handle_block_timer()

    assert running_service.timer.is_armed
    assert running_service.recorder.is_recording()

# =============================================================================
# REMOTE CONTROL TESTS
# =============================================================================


@pytest.mark.unit_integration
async def test_remote_stop_saves_block(running_service):
    """
    Test STOP command.

    Should:
    - Save the current block
    - Consume the control file
    - Leave the machine waiting
    """
    send(running_service, "STOP")

    await running_service._check_control_commands()

    assert not running_service.control_file.exists()
    assert len(running_service.storage.storage.list_all()) == 1
    assert running_service.machine.state.type == RecorderState.WAITING_FOR_VIDEO


@pytest.mark.unit_integration
async def test_remote_enable_resumes_after_stop(running_service):
    """Test ENABLE after STOP starts a new block."""
    send(running_service, "STOP")
    await running_service._check_control_commands()

    send(running_service, "enable")
    await running_service._check_control_commands()

    assert running_service.machine.is_recording
    assert running_service.machine.blocks_started == 2


@pytest.mark.unit_integration
async def test_remote_disable_and_enable(running_service):
    """Test DISABLE saves and idles, ENABLE records again."""
    send(running_service, "DISABLE")
    await running_service._check_control_commands()

    assert running_service.machine.state.type == RecorderState.IDLE
    assert len(running_service.storage.storage.list_all()) == 1

    send(running_service, "ENABLE")
    await running_service._check_control_commands()

    assert running_service.machine.is_recording


@pytest.mark.unit_integration
async def test_remote_stop_ignored_when_idle(service, caplog):
    """Test STOP outside RECORDING only logs a warning."""
    send(service, "STOP")

    with caplog.at_level(logging.WARNING):
        await service._check_control_commands()

    assert "Remote STOP ignored" in caplog.text


@pytest.mark.unit_integration
async def test_remote_status_logs(running_service, caplog):
    """Test STATUS logs machine and storage status."""
    send(running_service, "STATUS")

    with caplog.at_level(logging.INFO):
        await running_service._check_control_commands()

    assert "machine:" in caplog.text
    assert "Storage Status:" in caplog.text


@pytest.mark.unit_integration
async def test_unknown_command(service, caplog):
    """Test unknown commands are consumed and logged."""
    send(service, "REWIND")

    with caplog.at_level(logging.WARNING):
        await service._check_control_commands()

    assert not service.control_file.exists()
    assert "Unknown remote command: REWIND" in caplog.text


# =============================================================================
# SHUTDOWN TESTS
# =============================================================================


@pytest.mark.unit_integration
async def test_shutdown_saves_active_block(service):
    """
    Test graceful shutdown.

    Should:
    - Save the block in progress
    - Cancel background monitors
    - Disarm the timer
    """
    await service.start()
    await wait_for(lambda: service.machine.is_recording)

    await service.shutdown()

    assert len(service.storage.storage.list_all()) == 1
    assert service.machine.state.type == RecorderState.IDLE
    assert service.timer.is_armed is False
    assert service._tasks == []


@pytest.mark.unit_integration
async def test_shutdown_during_rotation_keeps_block(local_service, tmp_path):
    """
    Test shutdown arriving while a rotation is saving.

    Should:
    - Wait for the rotated block to be written before closing storage
    - Save the block the rotation started as well
    """
    await local_service.start()
    await wait_for(lambda: local_service.machine.is_recording)

    rotation = asyncio.create_task(local_service._handle_block_timer())
    await asyncio.sleep(0)
    assert local_service.machine.state.type == RecorderState.STOPPING

    await local_service.shutdown()
    await rotation

    assert local_service.machine.state.type == RecorderState.IDLE

    reopened = LocalStorage(base_path=tmp_path / "data")
    reopened.initialize()
    try:
        assert len(reopened.list_all()) == 2
    finally:
        reopened.cleanup()

@pytest.mark.unit_integration
async def test_run_stops_on_request(service):
    """Test run() returns after request_stop()."""
    run_task = asyncio.create_task(service.run())
    await wait_for(lambda: service.machine.is_recording)

    service.request_stop()
    await asyncio.wait_for(run_task, timeout=2.0)

    assert service.machine.state.type == RecorderState.IDLE
