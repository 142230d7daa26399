"""
Central Configuration File

ALL configuration values live here. This is the single source of truth.

Guidelines:
- Secrets and per-machine overrides belong in .env, NOT here
- Import these settings in modules: from config.settings import BLOCK_DURATION_SECONDS
- Storage overrides can also come from config/storage.yaml (see storage/config.py)
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# =============================================================================
# BLOCK RECORDING CONFIGURATION
# =============================================================================

# Block rotation (in seconds)
BLOCK_DURATION_SECONDS = float(os.getenv("BLOCK_DURATION_SECONDS", "300"))  # 5 min

# Thumbnail sampling
THUMBNAIL_INTERVAL_SECONDS = float(os.getenv("THUMBNAIL_INTERVAL_SECONDS", "3"))
THUMBNAIL_QUALITY = 5  # ffmpeg mjpeg qscale (2 = best, 31 = worst)
THUMBNAIL_WIDTH = 320  # Snapshot width in pixels (height keeps aspect)

# Video readiness polling
VIDEO_POLL_INTERVAL = float(os.getenv("VIDEO_POLL_INTERVAL", "0.5"))  # seconds

# =============================================================================
# CAPTURE CONFIGURATION
# =============================================================================

DEFAULT_CAMERA_DEVICE = os.getenv("CAMERA_DEVICE", "/dev/video0")
CAPTURE_STOP_TIMEOUT = 5.0  # seconds to let ffmpeg finalize before SIGKILL

# Video Settings
VIDEO_WIDTH = 1920
VIDEO_HEIGHT = 1080
VIDEO_FPS = 30
VIDEO_CODEC = "libx264"
VIDEO_PRESET = "ultrafast"  # FFmpeg encoding preset
VIDEO_CRF = 23  # Constant Rate Factor (quality)
VIDEO_FORMAT = "mp4"
FFMPEG_LOG_LEVEL = "error"

# =============================================================================
# STORAGE CONFIGURATION
# =============================================================================

STORAGE_BASE_PATH = Path(os.getenv("STORAGE_BASE_PATH", "./session_data"))
SESSION_DB_NAME = "session_store.db"

# Retention: total seconds of unsaved recordings to keep (10 minutes)
MAX_RECENT_DURATION_SECONDS = int(os.getenv("MAX_RECENT_DURATION_SECONDS", "600"))

# Default page size for recent-session listings
RECENT_SESSIONS_LIMIT = 10

# SQLite busy timeout (seconds) before a write gives up
SQLITE_TIMEOUT_SECONDS = 5.0

# =============================================================================
# SERVICE CONFIGURATION
# =============================================================================

# Remote Control Configuration
# File-based control for triggering actions via SSH/scripts
# Commands: ENABLE, DISABLE, STOP, STATUS
CONTROL_FILE = os.getenv(
    "CONTROL_FILE",
    "/tmp/practice_recorder_control.cmd",  # noqa: S108
)
CONTROL_POLL_INTERVAL = 1.0  # seconds

# Logging Configuration
LOG_DIR = os.getenv("LOG_DIR", "/var/log/practice-recorder")
LOG_SERVICE_FILE = "service.log"
LOG_BACKUP_DAYS = 7
