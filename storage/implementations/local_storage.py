"""
Local Storage Implementation

Concrete implementation of SessionStoreInterface backed by a SQLite file.
Coordinates the managers to provide complete storage functionality.
"""

import logging
import uuid
from pathlib import Path
from typing import List, Optional

from config import settings
from storage.interfaces.storage_interface import (
    SessionNotFoundError,
    SessionStoreInterface,
    StorageUnavailableError,
)
from storage.managers.cleanup_manager import CleanupManager
from storage.managers.metadata_manager import MetadataManager
from storage.models.session import Session, SessionDraft, StorageStats


class LocalStorage(SessionStoreInterface):
    """
    Local SQLite session store.

    This class coordinates the managers to provide complete storage
    functionality. It's the "real" storage that persists sessions to disk.
    Nothing touches the disk until initialize() is called.
    """

    def __init__(
        self,
        base_path: Optional[Path] = None,
        db_name: str = settings.SESSION_DB_NAME,
    ):
        """
        Initialize local storage.

        Args:
            base_path: Storage directory (default: settings.STORAGE_BASE_PATH)
            db_name: Database filename inside base_path
        """
        self.logger = logging.getLogger(__name__)
        self.base_path = Path(base_path or settings.STORAGE_BASE_PATH)
        self.db_name = db_name

        self.metadata_manager: Optional[MetadataManager] = None
        self.cleanup_manager = CleanupManager()

        self.logger.info(f"Local storage created (base: {self.base_path})")

    def initialize(self) -> None:
        """Create the storage directory and open the database"""
        if self.metadata_manager is not None:
            return

        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"Cannot create storage directory {self.base_path}: {e}",
            ) from e

        self.metadata_manager = MetadataManager(self.base_path, self.db_name)
        self.logger.info("Storage system initialized and ready")

    @property
    def _db(self) -> MetadataManager:
        if self.metadata_manager is None:
            raise StorageUnavailableError("Storage not initialized")
        return self.metadata_manager

    def create_atomic(self, draft: SessionDraft, payload: bytes) -> str:
        """
        Save a new session with its payload.

        Process:
        1. Generate id (blob_key = id)
        2. Write session, thumbnails, payload in one transaction

        Returns:
            Generated session id

        Raises:
            StorageUnavailableError: If the write fails (nothing is stored)
        """
        session = draft.to_session(uuid.uuid4().hex)
        self._db.insert_session(session, payload)

        self.logger.info(
            f"Saved session {session.id} "
            f"({session.duration:.1f}s, {len(payload)} bytes)",
        )
        return session.id

    def get(self, session_id: str) -> Optional[Session]:
        """Get session by id"""
        return self._db.get_session(session_id)

    def get_payload(self, session_id: str) -> Optional[bytes]:
        """Get recorded media by session id"""
        return self._db.get_payload(session_id)

    def list_recent(self, limit: Optional[int] = None) -> List[Session]:
        """Unsaved sessions, newest first"""
        return self._db.list_sessions(saved=False, limit=limit)

    def list_saved(self) -> List[Session]:
        """Saved sessions, newest first"""
        return self._db.list_sessions(saved=True)

    def list_all(self) -> List[Session]:
        """Every session, newest first"""
        return self._db.list_sessions()

    def update(self, session_id: str, **patch) -> Session:
        """
        Merge fields into a stored session.

        Raises:
            SessionNotFoundError: If the session does not exist
            ValueError: If the patch names an unknown field
        """
        existing = self._db.get_session(session_id)
        if existing is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")

        updated = existing.merged(**patch)
        self._db.update_session(updated)

        self.logger.debug(f"Updated session {session_id}: {sorted(patch)}")
        return updated

    def delete_atomic(self, session_id: str) -> None:
        """Delete session and payload together (missing id is a no-op)"""
        if self._db.delete_session(session_id):
            self.logger.info(f"Deleted session {session_id}")
        else:
            self.logger.debug(f"Delete skipped, no session {session_id}")

    def prune(self, budget_seconds: float) -> int:
        """
        Delete the oldest unsaved sessions beyond the duration budget.

        Returns:
            Number of sessions deleted
        """
        recent = self.list_recent()
        to_delete, plan = self.cleanup_manager.plan_prune(recent, budget_seconds)

        if not to_delete:
            self.logger.debug(
                f"Nothing to prune ({plan['keep_count']} sessions, "
                f"{plan['kept_duration_seconds']:.0f}s within {budget_seconds}s)",
            )
            return 0

        self.logger.info(
            f"Pruning {plan['delete_count']} sessions "
            f"({plan['deleted_duration_seconds']:.0f}s beyond {budget_seconds}s budget)",
        )
        stats = self.cleanup_manager.prune_sessions(to_delete, self.delete_atomic)
        return stats["deleted"]

    def clear(self) -> int:
        """Delete everything"""
        count = self._db.delete_all()
        self.logger.warning(f"Cleared all sessions ({count} deleted)")
        return count

    def get_stats(self) -> StorageStats:
        """Get storage statistics"""
        return self._db.get_stats()

    def is_available(self) -> bool:
        """Check if storage is initialized"""
        return self.metadata_manager is not None

    def cleanup(self) -> None:
        """Close the database"""
        self.logger.info("Cleaning up storage resources")
        if self.metadata_manager is not None:
            self.metadata_manager.cleanup()
            self.metadata_manager = None
