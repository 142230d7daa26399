"""
Storage Controller

High-level session storage coordination.
Provides simple API with event callbacks for the main application.
"""

import logging
from typing import Callable, List, Optional

from config import settings
from recording.interfaces.capture_interface import CaptureResult
from storage.constants import StorageState
from storage.implementations.local_storage import LocalStorage
from storage.interfaces.storage_interface import StorageError, SessionStoreInterface
from storage.models.session import Session, SessionDraft, StorageStats, Thumbnail


class StorageController:
    """
    High-level storage controller.

    This class:
    - Turns finished blocks into persisted sessions
    - Enforces the retention budget after every save
    - Fires events for important conditions

    Usage:
        storage = StorageController()
        storage.on_sessions_changed = lambda: refresh_list()
        storage.on_storage_error = lambda msg: show_error(msg)

        if storage.initialize():
            session = storage.save_block(result, thumbnails, block_start)
    """

    def __init__(
        self,
        storage_impl: Optional[SessionStoreInterface] = None,
        max_recent_duration_seconds: float = settings.MAX_RECENT_DURATION_SECONDS,
    ):
        """
        Initialize storage controller.

        Args:
            storage_impl: Session store (None = auto-create LocalStorage)
            max_recent_duration_seconds: Retention budget for unsaved sessions
        """
        self.logger = logging.getLogger(__name__)

        self.storage = storage_impl or LocalStorage()
        self.max_recent_duration_seconds = max_recent_duration_seconds
        self.state = StorageState.UNINITIALIZED

        # Event callbacks
        self.on_sessions_changed: Optional[Callable[[], None]] = None
        self.on_storage_error: Optional[Callable[[str], None]] = (
            None  # passes error message
        )
        self.on_prune_complete: Optional[Callable[[int], None]] = None  # passes count

        self.logger.info("Storage controller initialized")

    def initialize(self) -> bool:
        """
        Open the session store.

        Blocking; the service runs this in a worker thread.

        Returns:
            True if storage is ready, False otherwise
        """
        try:
            self.storage.initialize()
        except StorageError as e:
            self.state = StorageState.ERROR
            self.logger.error(f"Storage initialization failed: {e}")
            self._trigger_error(f"Storage initialization failed: {e}")
            return False

        self.state = StorageState.READY
        self.logger.info("Storage ready")
        return True

    # =========================================================================
    # SESSION OPERATIONS
    # =========================================================================

    def save_block(
        self,
        result: CaptureResult,
        thumbnails: List[Thumbnail],
        block_start: float,
    ) -> Optional[Session]:
        """
        Persist a finished block as a new session.

        Process:
        1. Skip empty payloads
        2. Build metadata (first thumbnail is the list preview)
        3. Write metadata + payload atomically
        4. Prune unsaved sessions to the duration budget

        Args:
            result: Capture result (media + measured duration)
            thumbnails: Samples taken during the block, in capture order
            block_start: Block start time (epoch seconds)

        Returns:
            Session object, or None if nothing was saved
        """
        if result.is_empty:
            self.logger.warning("Empty recording, nothing to save")
            return None

        draft = SessionDraft(
            created_at=block_start,
            duration=result.duration_seconds,
            thumbnail=thumbnails[0].image if thumbnails else b"",
            thumbnails=list(thumbnails),
            saved=False,
        )

        try:
            session_id = self.storage.create_atomic(draft, result.data)
        except StorageError as e:
            self.logger.error(f"Failed to save block: {e}")
            self._trigger_error(str(e))
            return None

        session = draft.to_session(session_id)
        self.logger.info(
            f"Block saved: {session.id} ({session.duration:.1f}s, "
            f"{len(thumbnails)} thumbnails)",
        )

        self.prune()
        self._trigger_sessions_changed()

        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        """Get session by id"""
        return self.storage.get(session_id)

    def get_payload(self, session_id: str) -> Optional[bytes]:
        """Get recorded media for a session"""
        return self.storage.get_payload(session_id)

    def list_recent(self, limit: Optional[int] = None) -> List[Session]:
        """Unsaved sessions, newest first"""
        return self.storage.list_recent(limit)

    def list_saved(self) -> List[Session]:
        """Saved sessions, newest first"""
        return self.storage.list_saved()

    def mark_saved(self, session_id: str, name: str) -> Session:
        """
        Star a session so it survives pruning.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        session = self.storage.mark_saved(session_id, name)
        self.logger.info(f"Session saved as '{name}': {session_id}")
        self._trigger_sessions_changed()
        return session

    def set_trim(self, session_id: str, trim_in: float, trim_out: float) -> Session:
        """
        Set trim points on a session.

        Raises:
            SessionNotFoundError: If the session does not exist
            ValueError: If the range is invalid
        """
        session = self.storage.set_trim(session_id, trim_in, trim_out)
        self._trigger_sessions_changed()
        return session

    def delete_session(self, session_id: str) -> None:
        """User-initiated delete (metadata + payload)"""
        self.storage.delete_atomic(session_id)
        self._trigger_sessions_changed()

    # =========================================================================
    # RETENTION
    # =========================================================================

    def prune(self, budget_seconds: Optional[float] = None) -> int:
        """
        Enforce the retention budget.

        Args:
            budget_seconds: Override budget (None = configured budget)

        Returns:
            Number of sessions deleted (0 on error)
        """
        budget = (
            self.max_recent_duration_seconds if budget_seconds is None else budget_seconds
        )

        try:
            count = self.storage.prune(budget)
        except StorageError as e:
            self.logger.error(f"Prune failed: {e}")
            self._trigger_error(f"Prune failed: {e}")
            return 0

        if count > 0:
            self._trigger_prune_complete(count)

        return count

    # =========================================================================
    # STATUS AND DIAGNOSTICS
    # =========================================================================

    def get_stats(self) -> StorageStats:
        """Get storage statistics"""
        return self.storage.get_stats()

    def get_status(self) -> dict:
        """
        Get comprehensive storage status.

        Returns:
            Dictionary with all status information
        """
        status = {
            "state": self.state.value,
            "available": self.storage.is_available(),
            "config": {
                "max_recent_duration_seconds": self.max_recent_duration_seconds,
            },
        }
        if self.state == StorageState.READY:
            status["storage_stats"] = self.get_stats().to_dict()
        return status

    def log_status(self) -> None:
        """Log current storage status"""
        stats = self.get_stats()

        self.logger.info(
            f"Storage Status: "
            f"recent={stats.recent_count} ({stats.recent_duration_seconds:.0f}s), "
            f"saved={stats.saved_count}, "
            f"payload={stats.payload_mb:.1f}MB",
        )

    # =========================================================================
    # EVENT TRIGGERS
    # =========================================================================

    def _trigger_sessions_changed(self) -> None:
        """Trigger session list changed event"""
        if self.on_sessions_changed:
            try:
                self.on_sessions_changed()
            except Exception as e:
                self.logger.error(f"Error in sessions_changed callback: {e}")

    def _trigger_prune_complete(self, count: int) -> None:
        """Trigger prune complete event"""
        if self.on_prune_complete:
            try:
                self.on_prune_complete(count)
            except Exception as e:
                self.logger.error(f"Error in prune_complete callback: {e}")

    def _trigger_error(self, error_msg: str) -> None:
        """Trigger storage error event"""
        if self.on_storage_error:
            try:
                self.on_storage_error(error_msg)
            except Exception as e:
                self.logger.error(f"Error in storage_error callback: {e}")

    # =========================================================================
    # CLEANUP
    # =========================================================================

    def cleanup(self) -> None:
        """Clean up storage resources"""
        self.logger.info("Cleaning up storage controller")
        self.storage.cleanup()
        self.logger.info("Storage controller cleanup complete")
