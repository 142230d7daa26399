"""
Recording Constants

Enums, FFmpeg command building, and small helpers for the capture layer.

Note: Configuration values (durations, video settings, etc.) live in
config/settings.py. This file contains only enums, FFmpeg-specific
constants, and utility functions.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from config.settings import (
    FFMPEG_LOG_LEVEL,
    THUMBNAIL_QUALITY,
    THUMBNAIL_WIDTH,
    VIDEO_CODEC,
    VIDEO_CRF,
    VIDEO_FPS,
    VIDEO_HEIGHT,
    VIDEO_PRESET,
    VIDEO_WIDTH,
)

# Video input format
# v4l2 is Video4Linux2, standard Linux video capture API
VIDEO_INPUT_FORMAT = "v4l2"

# Input queue size for USB camera timing jitter
THREAD_QUEUE_SIZE = 512

# Snapshot refresh rate (frames per second written to the snapshot file)
SNAPSHOT_FPS = 1

# Filename of the live snapshot inside the capture work directory
SNAPSHOT_FILENAME = "latest.jpg"


# =============================================================================
# RECORDING STATE TRACKING
# =============================================================================


class RecordingState(Enum):
    """
    States a capture session reports.

    Lifecycle: INACTIVE -> RECORDING -> INACTIVE
    """

    INACTIVE = "inactive"  # No capture running
    RECORDING = "recording"  # Actively capturing


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_ffmpeg_command(
    input_device: str,
    output_file: str,
    snapshot_file: Optional[str] = None,
    width: int = VIDEO_WIDTH,
    height: int = VIDEO_HEIGHT,
    fps: int = VIDEO_FPS,
) -> list[str]:
    """
    Generate FFmpeg command for block capture.

    Captures video from a V4L2 webcam and encodes it to output_file.
    When snapshot_file is given, a second output keeps a low-rate JPEG of
    the latest frame up to date for thumbnail sampling.

    Args:
        input_device: Camera device path (e.g., /dev/video0)
        output_file: Output filename with path
        snapshot_file: Optional path for the rolling JPEG snapshot
        width: Video width in pixels
        height: Video height in pixels
        fps: Frame rate

    Returns:
        List of command arguments for subprocess

    Example:
        cmd = get_ffmpeg_command("/dev/video0", "block.mp4", "latest.jpg")
        subprocess.Popen(cmd)
    """
    command = [
        "ffmpeg",
        "-loglevel",
        FFMPEG_LOG_LEVEL,
        "-f",
        VIDEO_INPUT_FORMAT,
        "-input_format",
        "mjpeg",  # MJPEG from camera (less CPU than raw)
        "-video_size",
        f"{width}x{height}",
        "-framerate",
        str(fps),
        "-thread_queue_size",
        str(THREAD_QUEUE_SIZE),
        "-i",
        input_device,
        # Main output: the block recording
        "-map",
        "0:v",
        "-c:v",
        VIDEO_CODEC,
        "-preset",
        VIDEO_PRESET,
        "-crf",
        str(VIDEO_CRF),
        "-pix_fmt",
        "yuv420p",
        # Fragmented MP4 stays valid when ffmpeg is stopped with SIGTERM
        "-movflags",
        "+frag_keyframe+empty_moov",
        "-y",
        output_file,
    ]

    if snapshot_file:
        command.extend(
            [
                "-map",
                "0:v",
                "-vf",
                f"fps={SNAPSHOT_FPS},scale={THUMBNAIL_WIDTH}:-1",
                "-q:v",
                str(THUMBNAIL_QUALITY),
                "-update",
                "1",  # Overwrite the same image file
                "-y",
                snapshot_file,
            ],
        )

    return command


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds to human-readable string.

    Example:
        format_duration(630) -> "10:30"
        format_duration(90) -> "1:30"
    """
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def validate_camera_device(device_path: str) -> bool:
    """
    Check if camera device exists and is a character device.

    Example:
        if validate_camera_device("/dev/video0"):
            print("Camera found!")
    """
    device = Path(device_path)
    return device.exists() and device.is_char_device()
