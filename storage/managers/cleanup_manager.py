"""
Cleanup Manager

Manages session pruning according to the retention budget.
Single responsibility: Cleanup operations only.
"""

import logging
from typing import Callable, List

from storage.models.session import Session


class CleanupManager:
    """
    Plans and executes duration-budget pruning.

    Responsibilities:
    - Decide which recent sessions fall outside the budget
    - Delete them one at a time, counting failures
    - Track cleanup statistics
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def plan_prune(
        self,
        recent: List[Session],
        budget_seconds: float,
    ) -> tuple[List[Session], dict]:
        """
        Plan a prune without executing.

        A session is kept while the total duration of the newer sessions
        kept before it is <= budget. So the session that first pushes the
        total over the budget is kept, and everything older is deleted.

        Args:
            recent: Unsaved sessions, newest first
            budget_seconds: Duration budget

        Returns:
            Tuple of (sessions_to_delete, statistics)
        """
        to_keep: List[Session] = []
        to_delete: List[Session] = []
        kept_duration = 0.0

        for session in recent:
            if session.saved:
                continue
            if not to_delete and kept_duration <= budget_seconds:
                to_keep.append(session)
                kept_duration += session.duration
            else:
                to_delete.append(session)

        stats = {
            "total_sessions": len(to_keep) + len(to_delete),
            "keep_count": len(to_keep),
            "delete_count": len(to_delete),
            "kept_duration_seconds": kept_duration,
            "deleted_duration_seconds": sum(s.duration for s in to_delete),
            "budget_seconds": budget_seconds,
        }

        return to_delete, stats

    def prune_sessions(
        self,
        sessions_to_delete: List[Session],
        delete_func: Callable[[str], None],
        dry_run: bool = False,
    ) -> dict:
        """
        Execute a planned prune.

        Args:
            sessions_to_delete: Sessions to delete
            delete_func: Function to call for each deletion (session_id) -> None
            dry_run: If True, only simulate without deleting

        Returns:
            Statistics dictionary
        """
        total = len(sessions_to_delete)
        deleted = 0
        errors = 0

        if total == 0:
            return {"total_sessions": 0, "deleted": 0, "errors": 0, "dry_run": dry_run}

        for session in sessions_to_delete:
            try:
                if not dry_run:
                    delete_func(session.id)
                deleted += 1
                self.logger.debug(
                    f"{'Would delete' if dry_run else 'Deleted'}: "
                    f"{session.id} ({session.duration:.1f}s)",
                )
            except Exception as e:
                errors += 1
                self.logger.error(f"Failed to delete {session.id}: {e}")

        if dry_run:
            self.logger.info(f"DRY RUN complete: Would prune {deleted} sessions")
        else:
            self.logger.info(
                f"Prune complete: Deleted {deleted}/{total} sessions, {errors} errors",
            )

        return {
            "total_sessions": total,
            "deleted": deleted,
            "errors": errors,
            "dry_run": dry_run,
        }
