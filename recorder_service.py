"""
Recorder Service

Main service coordinator for the practice recorder.
This is the central orchestrator that wires all controllers together.

Architecture:
- One RecorderMachine owned by the service, driven from one event loop
- ServiceCallbacks adapts the machine's side effects to the controllers
- Storage opened in a worker thread, then reported to the machine
- Video readiness polled and reported to the machine
- File-based remote control (ENABLE / DISABLE / STOP / STATUS)

State Flow:
    IDLE -> INITIALIZING -> WAITING_FOR_VIDEO -> RECORDING -> STOPPING
                                   ^                 ^            |
                                   |                 +-(rotation)-+
                                   +------------(block saved)-----+

Every block ends in STOPPING, which saves it (if it produced media)
and prunes unsaved sessions to the retention budget.
"""

import argparse
import asyncio
import logging
import logging.handlers
import signal
import sys
import time
from pathlib import Path
from typing import Callable, List, Optional

from config.settings import (
    CONTROL_FILE,
    CONTROL_POLL_INTERVAL,
    LOG_BACKUP_DAYS,
    LOG_DIR,
    LOG_SERVICE_FILE,
    VIDEO_POLL_INTERVAL,
)
from core.state_machine import MachineState, RecorderCallbacks, RecorderMachine
from recording import BlockRecorder, BlockTimer, RecordingFactory, ThumbnailSampler
from recording.factory import CaptureMode
from recording.interfaces.capture_interface import CaptureError, CaptureResult
from storage import Session, StorageController, StorageFactory, StorageState, Thumbnail
from storage.config import StorageConfig
from storage.factory import StorageMode


class ServiceCallbacks(RecorderCallbacks):
    """
    Connects RecorderMachine side effects to the real controllers.

    Storage writes run in a worker thread so the event loop keeps
    sampling thumbnails while a block is persisted.
    """

    def __init__(
        self,
        recorder: BlockRecorder,
        sampler: ThumbnailSampler,
        timer: BlockTimer,
        storage: StorageController,
        clock: Callable[[], float] = time.time,
    ):
        self.logger = logging.getLogger(__name__)
        self.recorder = recorder
        self.sampler = sampler
        self.timer = timer
        self.storage = storage
        self._clock = clock

    def on_start_recording(self) -> None:
        self.recorder.start_recording()

    async def on_stop_recording(self) -> Optional[CaptureResult]:
        return await self.recorder.stop_recording()

    def on_start_thumbnails(self, block_start: float) -> None:
        self.sampler.start(block_start)

    def on_stop_thumbnails(self) -> List[Thumbnail]:
        return self.sampler.drain()

    def on_start_block_timer(self) -> None:
        self.timer.start()

    def on_stop_block_timer(self) -> None:
        self.timer.stop()

    async def on_save_block(
        self,
        result: CaptureResult,
        thumbnails: List[Thumbnail],
        block_start: float,
    ) -> Optional[Session]:
        return await asyncio.to_thread(
            self.storage.save_block,
            result,
            thumbnails,
            block_start,
        )

    def on_state_change(self, state: MachineState) -> None:
        self.logger.debug(f"Recorder state: {state}")

    def now(self) -> float:
        return self._clock()


class RecorderService:
    """
    Main service coordinator.

    Wires together:
    - Recording system (capture, thumbnails, rotation timer)
    - Session storage and retention
    - The recorder state machine
    - Background monitors (video readiness, remote control)

    Usage:
        service = RecorderService()
        asyncio.run(service.run())  # Runs until SIGINT/SIGTERM
    """

    def __init__(
        self,
        capture_mode: CaptureMode = "auto",
        storage_mode: StorageMode = "auto",
        storage_config: Optional[StorageConfig] = None,
        control_file: Optional[Path] = None,
    ):
        """Initialize all controllers and setup callbacks."""
        self.logger = logging.getLogger(__name__)
        self.logger.info("Initializing Recorder Service...")

        # Remote control file for SSH/script commands
        self.control_file = Path(control_file or CONTROL_FILE)

        # Storage
        self.logger.info("Initializing storage...")
        config = storage_config or StorageConfig()
        self.storage = StorageController(
            StorageFactory.create_storage(mode=storage_mode, config=config),
            max_recent_duration_seconds=config.max_recent_duration_seconds,
        )

        # Recording system
        self.logger.info("Initializing recording system...")
        self.recorder = BlockRecorder(RecordingFactory.create_capture(mode=capture_mode))
        self.sampler = ThumbnailSampler(
            RecordingFactory.create_frame_source(self.recorder.capture),
        )
        self.timer = BlockTimer(on_fire=self._handle_block_timer)

        # State machine
        self.callbacks = ServiceCallbacks(
            self.recorder,
            self.sampler,
            self.timer,
            self.storage,
        )
        self.machine = RecorderMachine(self.callbacks)

        self._stop_event: Optional[asyncio.Event] = None
        self._tasks: List[asyncio.Task] = []

        self._setup_callbacks()

        self.logger.info("Recorder Service initialized successfully")

    def _setup_callbacks(self):
        """Wire up controller callbacks for event coordination."""
        self.storage.on_storage_error = self._handle_storage_error
        self.storage.on_prune_complete = self._handle_prune_complete

    # =========================================================================
    # MAIN LOOP
    # =========================================================================

    async def run(self):
        """
        Main service loop.

        Runs until shutdown signal received.
        """
        loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()

        # Register signal handlers for graceful shutdown
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._signal_handler, sig)

        self.logger.info("Starting Recorder Service main loop...")

        try:
            await self.start()
            await self._stop_event.wait()
        finally:
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.remove_signal_handler(sig)
            await self.shutdown()

    async def start(self):
        """Enable recording, open storage, start background monitors."""
        self.machine.enable()
        await self._initialize_storage()

        self._tasks = [
            asyncio.create_task(self._video_monitor()),
            asyncio.create_task(self._control_monitor()),
        ]

    def request_stop(self):
        """Ask run() to shut down"""
        if self._stop_event is not None:
            self._stop_event.set()

    async def _initialize_storage(self):
        """Open storage off the event loop and report the outcome."""
        ready = await asyncio.to_thread(self.storage.initialize)
        if ready:
            self._apply_input("storage_ready", self.machine.storage_ready)
        else:
            await self.machine.storage_failed()

    def _apply_input(self, name: str, machine_input: Callable[[], None]):
        """
        Feed a synchronous input that may start a block.

        Capture start failures are logged here; the machine stays in
        RECORDING and the next stop simply saves nothing.
        """
        try:
            machine_input()
        except CaptureError as e:
            self.logger.error(f"Failed to start block on {name}: {e}")

    async def _handle_block_timer(self):
        """Block duration elapsed - rotate."""
        try:
            await self.machine.block_timer_fired()
        except CaptureError as e:
            self.logger.error(f"Failed to start next block: {e}")

    # =========================================================================
    # BACKGROUND MONITORS
    # =========================================================================

    async def _video_monitor(self):
        """Poll capture availability and report changes to the machine."""
        self.logger.info("Video monitor started")

        while True:
            try:
                if self.recorder.is_ready():
                    self._apply_input("video_ready", self.machine.video_ready)
                else:
                    await self.machine.video_not_ready()
            except Exception as e:
                self.logger.error(f"Video monitor error: {e}", exc_info=True)

            await asyncio.sleep(VIDEO_POLL_INTERVAL)

    async def _control_monitor(self):
        """Poll the remote control file."""
        while True:
            await self._check_control_commands()
            await asyncio.sleep(CONTROL_POLL_INTERVAL)

    async def _check_control_commands(self):
        """
        Check for and process remote control commands.

        Monitors control file for commands sent via SSH/scripts:
            echo STOP > /tmp/practice_recorder_control.cmd

        The file is deleted after reading so a command runs once.
        """
        if not self.control_file.exists():
            return

        try:
            command = self.control_file.read_text().strip().upper()
            self.control_file.unlink()
        except OSError as e:
            self.logger.error(f"Failed to read control command: {e}")
            return

        self.logger.info(f"Remote command received: {command}")

        try:
            await self._process_remote_command(command)
        except Exception as e:
            # Never crash on control command failure
            self.logger.error(f"Failed to process control command: {e}", exc_info=True)

    async def _process_remote_command(self, command: str):
        """
        Process a specific remote command.

        Args:
            command: Command string (ENABLE, DISABLE, STOP, STATUS)
        """
        if command == "ENABLE":
            self.logger.info("Remote ENABLE -> enabling recorder")
            self._apply_input("enable", self.machine.enable)
            if self.storage.state == StorageState.READY:
                # Also restarts after a remote STOP
                self._apply_input("resume", self.machine.resume)
            else:
                await self._initialize_storage()

        elif command == "DISABLE":
            self.logger.info("Remote DISABLE -> disabling recorder")
            await self.machine.disable()

        elif command == "STOP":
            if not self.machine.is_recording:
                self.logger.warning(
                    f"Remote STOP ignored - state is {self.machine.state} "
                    "(must be recording)",
                )
                return
            session = await self.machine.stop_current_block()
            if session:
                self.logger.info(f"Remote STOP -> saved {session.summary()}")
            else:
                self.logger.info("Remote STOP -> block stopped, nothing saved")

        elif command == "STATUS":
            self.logger.info(f"Remote STATUS -> machine: {self.machine.get_status()}")
            self.storage.log_status()

        else:
            self.logger.warning(f"Unknown remote command: {command}")

    # =========================================================================
    # STORAGE EVENT HANDLERS
    # =========================================================================

    def _handle_storage_error(self, error_message: str):
        """Handle storage error."""
        self.logger.error(f"Storage error: {error_message}")

    def _handle_prune_complete(self, count: int):
        """Handle retention prune."""
        self.logger.info(f"Retention: pruned {count} old sessions")

    # =========================================================================
    # SHUTDOWN HANDLING
    # =========================================================================

    def _signal_handler(self, signum):
        """
        Handle shutdown signals.

        Args:
            signum: Signal number
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received signal {signal_name}, shutting down...")
        self.request_stop()

    async def shutdown(self):
        """
        Graceful shutdown.

        Saves the block in progress, stops monitors, releases resources.
        """
        self.logger.info("Shutting down Recorder Service...")

        # A rotation or STOP in flight finishes saving before anything is torn down
        await self.machine.wait_until_settled()

        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        if self.machine.is_recording:
            self.logger.info("Saving active block...")
        await self.machine.disable()

        self.timer.stop()
        self.sampler.drain()
        self.recorder.cleanup()
        self.storage.cleanup()

        self.logger.info("Recorder Service shutdown complete")


def setup_logging(log_dir: str = LOG_DIR):
    """
    Setup logging with rotation.

    Logs to both console and file with rotation:
    - Daily rotation
    - Keep LOG_BACKUP_DAYS days of logs
    """
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)

    # Console handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(message)s | %(name)s"))
    logger.addHandler(console_handler)

    file_format = logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s | %(name)s",
    )

    log_file = Path(log_dir) / LOG_SERVICE_FILE
    try:
        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(log_file),
            when="midnight",
            interval=1,
            backupCount=LOG_BACKUP_DAYS,
            encoding="utf-8",
        )
    except (PermissionError, FileNotFoundError):
        # Fallback to local logs directory if LOG_DIR not writable
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)

        fallback_log = logs_dir / LOG_SERVICE_FILE
        logger.warning(
            f"Cannot write to {log_file}, using fallback: {fallback_log}",
        )
        logger.info(
            f"To fix: sudo mkdir -p {log_dir} && sudo chown $(whoami) {log_dir}",
        )

        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(fallback_log),
            when="midnight",
            interval=1,
            backupCount=LOG_BACKUP_DAYS,
            encoding="utf-8",
        )

    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(file_format)
    logger.addHandler(file_handler)


def main():
    """
    Main entry point for the service.

    Sets up logging and runs the service.
    """
    parser = argparse.ArgumentParser(description="Practice recorder service")
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use mock capture and in-memory storage (no camera needed)",
    )
    args = parser.parse_args()

    setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("Practice Recorder Service Starting")
    logger.info("=" * 60)

    try:
        if args.mock:
            service = RecorderService(capture_mode="mock", storage_mode="mock")
        else:
            service = RecorderService()
        asyncio.run(service.run())
    except Exception as e:
        logger.critical(f"Fatal error in main: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
