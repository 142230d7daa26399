"""
FFmpeg Capture Implementation

Real block capture using an FFmpeg subprocess.
Records from a USB webcam into a scratch file and, alongside it, keeps a
low-rate JPEG snapshot of the latest frame for thumbnail sampling.

When a block stops, the scratch file is read back into memory and handed
to the caller as a CaptureResult; the scratch directory is then removed.
"""

import asyncio
import logging
import shutil
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Optional

from config.settings import (
    CAPTURE_STOP_TIMEOUT,
    DEFAULT_CAMERA_DEVICE,
    VIDEO_FORMAT,
    VIDEO_FPS,
    VIDEO_HEIGHT,
    VIDEO_WIDTH,
)
from recording.constants import (
    SNAPSHOT_FILENAME,
    RecordingState,
    get_ffmpeg_command,
    validate_camera_device,
)
from recording.interfaces.capture_interface import (
    CaptureError,
    CaptureInterface,
    CaptureProcessError,
    CaptureResult,
    CaptureUnavailableError,
)


class FFmpegCapture(CaptureInterface):
    """
    Block capture using FFmpeg.

    Non-blocking start - FFmpeg runs in a background process.
    stop() terminates FFmpeg gracefully (SIGTERM) off the event loop
    and returns the finished media.

    Usage:
        capture = FFmpegCapture(camera_device="/dev/video0")
        capture.start()
        # ... recording happens in background ...
        result = await capture.stop()
        capture.cleanup()
    """

    def __init__(
        self,
        camera_device: str = DEFAULT_CAMERA_DEVICE,
        width: int = VIDEO_WIDTH,
        height: int = VIDEO_HEIGHT,
        fps: int = VIDEO_FPS,
        work_root: Optional[Path] = None,
    ):
        """
        Initialize FFmpeg capture.

        Args:
            camera_device: Path to camera device (e.g., /dev/video0)
            width: Video width in pixels
            height: Video height in pixels
            fps: Frame rate
            work_root: Parent for per-block scratch dirs (default: system temp)
        """
        self.logger = logging.getLogger(__name__)

        # Configuration
        self.camera_device = camera_device
        self.width = width
        self.height = height
        self.fps = fps
        self.work_root = work_root

        # State tracking
        self._process: Optional[subprocess.Popen] = None
        self._work_dir: Optional[Path] = None
        self._output_file: Optional[Path] = None
        self._snapshot_file: Optional[Path] = None
        self._start_time: Optional[float] = None

        self.logger.info(
            f"FFmpeg Capture initialized "
            f"(camera: {camera_device}, resolution: {width}x{height}, fps: {fps})",
        )

    def start(self) -> None:
        """
        Start capturing a block with FFmpeg.

        Launches FFmpeg in background and returns at once. Snapshots
        appear once the camera has warmed up; until then the thumbnail
        sampler skips its ticks. A process that dies later is reported
        by stop().
        """
        if self._process is not None:
            raise CaptureUnavailableError("Already capturing")

        if not validate_camera_device(self.camera_device):
            raise CaptureUnavailableError(
                f"Camera device not found: {self.camera_device}",
            )

        if self.work_root is not None:
            self.work_root.mkdir(parents=True, exist_ok=True)
        work_dir = Path(tempfile.mkdtemp(prefix="block_", dir=self.work_root))
        output_file = work_dir / f"block.{VIDEO_FORMAT}"
        snapshot_file = work_dir / SNAPSHOT_FILENAME

        command = get_ffmpeg_command(
            input_device=self.camera_device,
            output_file=str(output_file),
            snapshot_file=str(snapshot_file),
            width=self.width,
            height=self.height,
            fps=self.fps,
        )

        self.logger.info(f"Starting FFmpeg capture to: {output_file}")
        self.logger.debug(f"FFmpeg command: {' '.join(command)}")

        try:
            # stdin closed so ffmpeg never waits for keyboard input;
            # stdout/stderr drained by communicate() on stop
            self._process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
            )

            # Exited already (bad arguments, missing device node)
            if self._process.poll() is not None:
                _, stderr = self._process.communicate()
                error_msg = stderr.decode("utf-8", errors="ignore")

                if "Device or resource busy" in error_msg:
                    raise CaptureUnavailableError(
                        f"Camera is busy: {self.camera_device}",
                    )
                raise CaptureProcessError(f"FFmpeg failed to start: {error_msg}")

        except FileNotFoundError:
            self._cleanup_failed_capture(work_dir)
            raise CaptureError(
                "FFmpeg not found. Install with: sudo apt-get install ffmpeg",
            )
        except Exception as e:
            self.logger.error(f"Failed to start capture: {e}")
            self._cleanup_failed_capture(work_dir)
            raise

        self._work_dir = work_dir
        self._output_file = output_file
        self._snapshot_file = snapshot_file
        self._start_time = time.monotonic()

        self.logger.info(f"Capture started (PID: {self._process.pid})")

    async def stop(self) -> Optional[CaptureResult]:
        """
        Stop FFmpeg and return the finished block.

        Process shutdown and file reading run in a worker thread so the
        event loop keeps ticking while FFmpeg writes its trailer.
        """
        if self._process is None:
            self.logger.warning("Not capturing, nothing to stop")
            return None

        self.logger.info("Stopping capture...")
        try:
            return await asyncio.to_thread(self._finalize)
        finally:
            self._reset_state()

    def _finalize(self) -> CaptureResult:
        """Terminate FFmpeg, read the output file (blocking)"""
        assert self._process is not None
        assert self._start_time is not None

        # SIGTERM lets ffmpeg flush buffers and close the file cleanly;
        # SIGKILL would leave a truncated file
        self._process.terminate()
        try:
            _, stderr = self._process.communicate(timeout=CAPTURE_STOP_TIMEOUT)
            if self._process.returncode not in (0, 255):
                error_msg = stderr.decode("utf-8", errors="ignore")
                self.logger.warning(
                    f"FFmpeg exited with code {self._process.returncode}: "
                    f"{error_msg}",
                )
        except subprocess.TimeoutExpired:
            self.logger.warning("FFmpeg didn't stop gracefully, force killing")
            self._process.kill()
            self._process.wait()

        duration_ms = (time.monotonic() - self._start_time) * 1000.0

        if self._output_file is None or not self._output_file.exists():
            self.logger.error("Output file was not created!")
            return CaptureResult(data=b"", duration_ms=duration_ms)

        try:
            data = self._output_file.read_bytes()
        except OSError as e:
            raise CaptureProcessError(f"Cannot read recorded block: {e}") from e

        self.logger.info(
            f"Block captured ({duration_ms / 1000:.1f}s, "
            f"{len(data) / (1024 * 1024):.1f} MB)",
        )
        return CaptureResult(data=data, duration_ms=duration_ms)

    def state(self) -> RecordingState:
        """RECORDING while the ffmpeg process is alive"""
        if self._process is not None and self._process.poll() is None:
            return RecordingState.RECORDING
        return RecordingState.INACTIVE

    def get_snapshot_file(self) -> Optional[Path]:
        """
        Path of the rolling snapshot for the current block.

        Returns None when no block is being captured.
        """
        return self._snapshot_file

    def is_ffmpeg_installed(self) -> bool:
        return shutil.which("ffmpeg") is not None

    def is_camera_present(self) -> bool:
        return validate_camera_device(self.camera_device)

    def is_available(self) -> bool:
        """
        Check if FFmpeg and camera are available.
        """
        if not self.is_ffmpeg_installed():
            self.logger.warning("FFmpeg not found in PATH")
            return False

        if not self.is_camera_present():
            self.logger.warning(f"Camera not found: {self.camera_device}")
            return False

        return True

    def cleanup(self) -> None:
        """
        Kill any active capture and drop its scratch files.
        """
        self.logger.info("Cleaning up FFmpeg Capture")

        if self._process is not None:
            try:
                self._process.kill()
                self._process.wait(timeout=1.0)
            except (OSError, subprocess.TimeoutExpired) as e:
                self.logger.warning(f"Error killing FFmpeg: {e}")
        self._reset_state()

        self.logger.info("FFmpeg Capture cleanup complete")

    def _reset_state(self) -> None:
        if self._work_dir is not None:
            shutil.rmtree(self._work_dir, ignore_errors=True)
        self._process = None
        self._work_dir = None
        self._output_file = None
        self._snapshot_file = None
        self._start_time = None

    def _cleanup_failed_capture(self, work_dir: Path) -> None:
        """
        Internal cleanup after failed capture attempt.
        """
        if self._process is not None:
            try:
                self._process.kill()
                self._process.wait(timeout=1.0)
            except (OSError, subprocess.TimeoutExpired):
                self.logger.debug("FFmpeg already gone")
            self._process = None

        shutil.rmtree(work_dir, ignore_errors=True)
