"""
Session Store Interface

Abstract interface for session storage following Dependency Inversion Principle.
Controllers depend on this interface, not concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from storage.models.session import Session, SessionDraft, StorageStats


class SessionStoreInterface(ABC):
    """
    Abstract base class for session storage.

    A session is two records, metadata and payload, which are always
    created and destroyed together. This allows easy swapping between the
    SQLite store and the in-memory mock for testing.
    """

    @abstractmethod
    def initialize(self) -> None:
        """
        Open the storage medium.

        Creates necessary directories, database, etc.

        Raises:
            StorageUnavailableError: If the medium cannot be used
        """

    @abstractmethod
    def create_atomic(self, draft: SessionDraft, payload: bytes) -> str:
        """
        Persist metadata and payload together.

        Either both records exist afterwards or neither does.

        Args:
            draft: Session metadata without id
            payload: Recorded media bytes

        Returns:
            The newly generated session id

        Raises:
            StorageUnavailableError: If the write fails
        """

    @abstractmethod
    def get(self, session_id: str) -> Optional[Session]:
        """
        Retrieve session metadata by id.

        Returns:
            Session or None if not found
        """

    @abstractmethod
    def get_payload(self, session_id: str) -> Optional[bytes]:
        """
        Retrieve the recorded media for a session.

        Returns:
            Payload bytes or None if not found
        """

    @abstractmethod
    def list_recent(self, limit: Optional[int] = None) -> List[Session]:
        """
        List unsaved sessions, newest first.

        Args:
            limit: Maximum number of sessions (None = all)
        """

    @abstractmethod
    def list_saved(self) -> List[Session]:
        """List saved sessions, newest first"""

    @abstractmethod
    def list_all(self) -> List[Session]:
        """List every session, newest first"""

    @abstractmethod
    def update(self, session_id: str, **patch) -> Session:
        """
        Merge fields into an existing session.

        id and blob_key are never changed.

        Returns:
            The updated Session

        Raises:
            SessionNotFoundError: If the session does not exist
            ValueError: If the patch names an unknown field
        """

    @abstractmethod
    def delete_atomic(self, session_id: str) -> None:
        """
        Remove metadata and payload together.

        Deleting a missing id is a no-op.
        """

    @abstractmethod
    def prune(self, budget_seconds: float) -> int:
        """
        Trim unsaved sessions to a total duration budget.

        Walks recent sessions newest-first and keeps them while the total
        duration before each one is within the budget; the rest are deleted.
        Saved sessions are never touched.

        Returns:
            Number of sessions deleted
        """

    @abstractmethod
    def clear(self) -> int:
        """
        Delete every session and payload.

        Returns:
            Number of sessions deleted
        """

    @abstractmethod
    def get_stats(self) -> StorageStats:
        """Get counts, durations and payload size"""

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if storage system is initialized and functional.
        """

    @abstractmethod
    def cleanup(self) -> None:
        """
        Clean up storage resources (close database connections, etc.).
        """

    # =========================================================================
    # CONVENIENCE OPERATIONS (built on update)
    # =========================================================================

    def mark_saved(self, session_id: str, name: str) -> Session:
        """Star a session so pruning never removes it"""
        return self.update(session_id, saved=True, name=name)

    def set_trim(self, session_id: str, trim_in: float, trim_out: float) -> Session:
        """
        Set trim points on a session.

        Raises:
            ValueError: Unless 0 <= trim_in < trim_out
        """
        if trim_in < 0 or trim_in >= trim_out:
            raise ValueError(
                f"Invalid trim range: in={trim_in}, out={trim_out} "
                f"(need 0 <= in < out)",
            )
        return self.update(session_id, trim_in=trim_in, trim_out=trim_out)


class StorageError(Exception):
    """
    Custom exception for storage-related errors.

    Makes it easy to catch storage-specific errors:
        except StorageError as e:
            logger.error(f"Storage failed: {e}")
    """


class StorageUnavailableError(StorageError):
    """Storage medium cannot be opened or written"""


class SessionNotFoundError(StorageError):
    """Session id does not exist"""
