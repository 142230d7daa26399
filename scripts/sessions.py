#!/usr/bin/env python3
"""
Session Management Script

Inspect and manage recorded sessions from the command line.

Usage:
    python scripts/sessions.py list                 # Recent sessions
    python scripts/sessions.py list --which saved   # Starred sessions
    python scripts/sessions.py save ID "Warmup"     # Star a session
    python scripts/sessions.py trim ID 3.5 42       # Set trim points
    python scripts/sessions.py export ID out.mp4    # Write media to a file
    python scripts/sessions.py delete ID            # Delete a session
    python scripts/sessions.py prune                # Dry run retention prune
    python scripts/sessions.py prune --apply        # Actually prune
    python scripts/sessions.py stats                # Storage statistics

Safe to run while the service is recording: every write is a single
SQLite transaction.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from storage import SessionListing, SessionNotFoundError, StorageController, StorageError
from storage.config import StorageConfig
from storage.factory import StorageFactory
from storage.managers.cleanup_manager import CleanupManager

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def open_storage(config: StorageConfig) -> StorageController:
    """Open the session store or exit"""
    storage = StorageController(
        StorageFactory.create_storage(mode="real", config=config),
        max_recent_duration_seconds=config.max_recent_duration_seconds,
    )
    if not storage.initialize():
        print(f"❌ Cannot open storage at {config.storage_base_path}")
        sys.exit(1)
    return storage


def cmd_list(storage: StorageController, args, config: StorageConfig) -> int:
    which = SessionListing(args.which)

    if which == SessionListing.RECENT:
        sessions = storage.list_recent(args.limit or config.recent_sessions_limit)
    elif which == SessionListing.SAVED:
        sessions = storage.list_saved()
    else:
        sessions = storage.storage.list_all()

    if not sessions:
        print(f"No {which.value} sessions")
        return 0

    print(f"📼 {len(sessions)} {which.value} sessions (newest first)")
    for session in sessions:
        print(f"  {session.summary()}")
    return 0


def cmd_save(storage: StorageController, args, config: StorageConfig) -> int:
    session = storage.mark_saved(args.session_id, args.name)
    print(f"⭐ Saved: {session.summary()}")
    return 0


def cmd_trim(storage: StorageController, args, config: StorageConfig) -> int:
    session = storage.set_trim(args.session_id, args.trim_in, args.trim_out)
    print(f"✂️  Trimmed: {session.summary()}")
    return 0


def cmd_export(storage: StorageController, args, config: StorageConfig) -> int:
    payload = storage.get_payload(args.session_id)
    if payload is None:
        print(f"❌ No session {args.session_id}")
        return 1

    output = Path(args.output)
    output.write_bytes(payload)
    print(f"✅ Exported {len(payload)} bytes to {output}")
    return 0


def cmd_delete(storage: StorageController, args, config: StorageConfig) -> int:
    if storage.get_session(args.session_id) is None:
        print(f"❌ No session {args.session_id}")
        return 1

    storage.delete_session(args.session_id)
    print(f"🗑️  Deleted {args.session_id}")
    return 0


def cmd_prune(storage: StorageController, args, config: StorageConfig) -> int:
    budget = config.max_recent_duration_seconds if args.budget is None else args.budget

    if not args.apply:
        to_delete, plan = CleanupManager().plan_prune(storage.list_recent(), budget)
        print(
            f"Budget {budget:.0f}s: keep {plan['keep_count']} "
            f"({plan['kept_duration_seconds']:.0f}s), "
            f"delete {plan['delete_count']} "
            f"({plan['deleted_duration_seconds']:.0f}s)",
        )
        for session in to_delete:
            print(f"  would delete {session.summary()}")
        if to_delete:
            print("💡 Run with --apply to actually delete these sessions")
        return 0

    count = storage.prune(budget)
    print(f"✅ Pruned {count} sessions")
    return 0


def cmd_stats(storage: StorageController, args, config: StorageConfig) -> int:
    stats = storage.get_stats()
    print("=" * 40)
    print("SESSION STORAGE")
    print("=" * 40)
    print(f"Location:        {config.storage_base_path / config.db_name}")
    print(
        f"Recent:          {stats.recent_count} "
        f"({stats.recent_duration_seconds:.0f}s of "
        f"{config.max_recent_duration_seconds:.0f}s budget)",
    )
    print(f"Saved:           {stats.saved_count} ({stats.saved_duration_seconds:.0f}s)")
    print(f"Payload:         {stats.payload_mb:.1f} MB")
    print("=" * 40)
    return 0


COMMANDS = {
    "list": cmd_list,
    "save": cmd_save,
    "trim": cmd_trim,
    "export": cmd_export,
    "delete": cmd_delete,
    "prune": cmd_prune,
    "stats": cmd_stats,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage recorded practice sessions")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Storage YAML config (default: config/storage.yaml)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="List sessions")
    p.add_argument(
        "--which",
        choices=[listing.value for listing in SessionListing],
        default=SessionListing.RECENT.value,
    )
    p.add_argument("--limit", type=int, default=None)

    p = sub.add_parser("save", help="Star a session so it is never pruned")
    p.add_argument("session_id")
    p.add_argument("name")

    p = sub.add_parser("trim", help="Set trim points (seconds)")
    p.add_argument("session_id")
    p.add_argument("trim_in", type=float)
    p.add_argument("trim_out", type=float)

    p = sub.add_parser("export", help="Write session media to a file")
    p.add_argument("session_id")
    p.add_argument("output")

    p = sub.add_parser("delete", help="Delete a session")
    p.add_argument("session_id")

    p = sub.add_parser("prune", help="Apply the retention budget")
    p.add_argument("--budget", type=float, default=None, help="Override budget (seconds)")
    p.add_argument(
        "--apply",
        action="store_true",
        help="Actually delete (default is dry run)",
    )

    sub.add_parser("stats", help="Show storage statistics")

    return parser


def main():
    """Main entry point."""
    args = build_parser().parse_args()

    config = StorageConfig(config_path=args.config, create_if_missing=False)
    storage = open_storage(config)

    try:
        code = COMMANDS[args.command](storage, args, config)
    except SessionNotFoundError as e:
        print(f"❌ {e}")
        code = 1
    except (StorageError, ValueError, OSError) as e:
        print(f"❌ {args.command} failed: {e}")
        code = 1
    finally:
        storage.cleanup()

    sys.exit(code)


if __name__ == "__main__":
    main()
