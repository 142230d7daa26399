"""
Mock Storage Implementation

In-memory session store for testing without a database.
Simulates all storage operations, including atomic failures.
"""

import logging
import uuid
from typing import Dict, List, Optional

from storage.interfaces.storage_interface import (
    SessionNotFoundError,
    SessionStoreInterface,
    StorageUnavailableError,
)
from storage.managers.cleanup_manager import CleanupManager
from storage.models.session import Session, SessionDraft, StorageStats


class MockStorage(SessionStoreInterface):
    """
    Mock storage for testing.

    This simulates storage operations in memory without touching the filesystem.
    Perfect for unit tests that don't need real database I/O.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

        # In-memory records (id -> Session / payload)
        self._sessions: Dict[str, Session] = {}
        self._payloads: Dict[str, bytes] = {}
        self._initialized = False

        self.cleanup_manager = CleanupManager()

        # Configuration for test scenarios
        self._should_fail_init = False
        self._should_fail_create = False

        # Track operations for test verification
        self.operation_log: List[str] = []

        self.logger.info("[MOCK] Storage initialized (simulation mode)")

    def _log_operation(self, operation: str) -> None:
        """Log operation for test verification"""
        self.operation_log.append(operation)
        self.logger.debug(f"[MOCK] {operation}")

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise StorageUnavailableError("Storage not initialized")

    def initialize(self) -> None:
        """Initialize mock storage"""
        if self._should_fail_init:
            self._log_operation("initialize: failed")
            raise StorageUnavailableError("Simulated storage failure")
        self._initialized = True
        self._log_operation("initialize")

    def create_atomic(self, draft: SessionDraft, payload: bytes) -> str:
        """Store metadata and payload (simulated)"""
        self._require_initialized()
        if self._should_fail_create:
            self._log_operation("create_atomic: failed")
            raise StorageUnavailableError("Simulated write failure")

        session = draft.to_session(uuid.uuid4().hex)
        self._sessions[session.id] = session
        self._payloads[session.blob_key] = bytes(payload)

        self._log_operation(f"create_atomic: {session.id}")
        return session.id

    def get(self, session_id: str) -> Optional[Session]:
        """Get session by id"""
        self._require_initialized()
        session = self._sessions.get(session_id)
        # Copies, so callers cannot change the stored record
        return session.merged() if session is not None else None

    def get_payload(self, session_id: str) -> Optional[bytes]:
        """Get payload by id"""
        self._require_initialized()
        return self._payloads.get(session_id)

    def _sorted(self, saved: Optional[bool] = None) -> List[Session]:
        sessions = [
            s.merged() for s in self._sessions.values() if saved is None or s.saved == saved
        ]
        sessions.sort(key=lambda s: s.created_at, reverse=True)
        return sessions

    def list_recent(self, limit: Optional[int] = None) -> List[Session]:
        """Unsaved sessions, newest first"""
        self._require_initialized()
        sessions = self._sorted(saved=False)
        return sessions[:limit] if limit is not None else sessions

    def list_saved(self) -> List[Session]:
        """Saved sessions, newest first"""
        self._require_initialized()
        return self._sorted(saved=True)

    def list_all(self) -> List[Session]:
        """Every session, newest first"""
        self._require_initialized()
        return self._sorted()

    def update(self, session_id: str, **patch) -> Session:
        """Merge fields into a session"""
        self._require_initialized()
        existing = self._sessions.get(session_id)
        if existing is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")

        updated = existing.merged(**patch)
        self._sessions[session_id] = updated
        self._log_operation(f"update: {session_id}")
        return updated

    def delete_atomic(self, session_id: str) -> None:
        """Delete session and payload (missing id is a no-op)"""
        self._require_initialized()
        self._sessions.pop(session_id, None)
        self._payloads.pop(session_id, None)
        self._log_operation(f"delete_atomic: {session_id}")

    def prune(self, budget_seconds: float) -> int:
        """Prune using the same plan as the real store"""
        to_delete, _ = self.cleanup_manager.plan_prune(self.list_recent(), budget_seconds)
        stats = self.cleanup_manager.prune_sessions(to_delete, self.delete_atomic)
        self._log_operation(f"prune: {stats['deleted']} deleted")
        return stats["deleted"]

    def clear(self) -> int:
        """Delete everything"""
        self._require_initialized()
        count = len(self._sessions)
        self._sessions.clear()
        self._payloads.clear()
        self._log_operation(f"clear: {count} deleted")
        return count

    def get_stats(self) -> StorageStats:
        """Get storage statistics"""
        self._require_initialized()
        recent = self._sorted(saved=False)
        saved = self._sorted(saved=True)
        return StorageStats(
            recent_count=len(recent),
            saved_count=len(saved),
            recent_duration_seconds=sum(s.duration for s in recent),
            saved_duration_seconds=sum(s.duration for s in saved),
            payload_bytes=sum(len(p) for p in self._payloads.values()),
        )

    def is_available(self) -> bool:
        """Mock storage is available once initialized"""
        return self._initialized

    def cleanup(self) -> None:
        """Cleanup mock storage"""
        self._log_operation("cleanup")

    # =========================================================================
    # TESTING HELPER METHODS (not part of SessionStoreInterface)
    # =========================================================================

    def simulate_init_failure(self) -> None:
        """Configure mock to fail on next initialize()"""
        self._should_fail_init = True

    def simulate_create_failure(self) -> None:
        """Configure mock to fail every create_atomic()"""
        self._should_fail_create = True

    def reset_test_config(self) -> None:
        """Reset test configuration to normal operation"""
        self._should_fail_init = False
        self._should_fail_create = False

    def payload_count(self) -> int:
        """Number of stored payloads (for orphan checks)"""
        return len(self._payloads)
