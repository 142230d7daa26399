#!/usr/bin/env python3
"""
Remote Control Script

Send commands to the recorder service remotely (via SSH or locally).

Usage:
    python scripts/remote_control.py enable     # Start block recording
    python scripts/remote_control.py disable    # Finish current block, go idle
    python scripts/remote_control.py stop       # Finish current block now
    python scripts/remote_control.py status     # Log status

Or directly from SSH:
    ssh pi@raspberrypi "python /opt/practice-recorder/scripts/remote_control.py stop"

How it works:
- Writes command to control file (CONTROL_FILE)
- Service checks this file every CONTROL_POLL_INTERVAL seconds
- File is deleted after processing
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import CONTROL_FILE

VALID_COMMANDS = ["ENABLE", "DISABLE", "STOP", "STATUS"]


def send_command(command: str) -> bool:
    """
    Send a command to the recorder service.

    Args:
        command: Command to send (ENABLE, DISABLE, STOP, STATUS)

    Returns:
        True if command was sent successfully, False otherwise
    """
    command = command.upper()

    if command not in VALID_COMMANDS:
        print(f"❌ Invalid command: {command}")
        print(f"Valid commands: {', '.join(VALID_COMMANDS)}")
        return False

    try:
        Path(CONTROL_FILE).write_text(command)
    except OSError as e:
        print(f"❌ Failed to send command: {e}")
        return False

    print(f"✅ Command sent: {command}")
    print("Service will process it within ~1 second")
    return True


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Send commands to the recorder service remotely",
        epilog="""
Examples:
  %(prog)s enable     # Start recording blocks
  %(prog)s stop       # Finish and save the current block
  %(prog)s disable    # Save the current block and stop recording
  %(prog)s status     # Show current status in service logs
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "command",
        choices=[c.lower() for c in VALID_COMMANDS],
        help="Command to send to recorder service",
    )

    args = parser.parse_args()

    success = send_command(args.command)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
