"""
Metadata Manager

Manages sessions, thumbnails and payloads in a SQLite database.
Single responsibility: Database operations only.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from config.settings import SESSION_DB_NAME, SQLITE_TIMEOUT_SECONDS
from storage.interfaces.storage_interface import (
    SessionNotFoundError,
    StorageError,
    StorageUnavailableError,
)
from storage.models.session import Session, StorageStats, Thumbnail

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS sessions (
        id TEXT PRIMARY KEY,
        blob_key TEXT NOT NULL,
        created_at REAL NOT NULL,
        duration REAL NOT NULL,
        thumbnail BLOB,
        saved INTEGER NOT NULL DEFAULT 0,
        name TEXT,
        trim_in REAL,
        trim_out REAL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS thumbnails (
        session_id TEXT NOT NULL,
        position INTEGER NOT NULL,
        time REAL NOT NULL,
        image BLOB NOT NULL,
        PRIMARY KEY (session_id, position)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS payloads (
        id TEXT PRIMARY KEY,
        data BLOB NOT NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_saved_created_at
    ON sessions(saved, created_at)
    """,
)


class MetadataManager:
    """
    Manages session records in SQLite database.

    Responsibilities:
    - Create and maintain database schema
    - Multi-table writes inside a single transaction
    - Query sessions by saved/recent

    Thread Safety:
    - One connection shared across threads, guarded by threading.Lock
    - Reads take the lock too, so they never see an uncommitted write
    - Every write is one explicit transaction (BEGIN IMMEDIATE ... COMMIT),
      rolled back on any error, so a session and its payload are never
      half-written
    """

    def __init__(self, storage_base: Path, db_name: str = SESSION_DB_NAME):
        """
        Initialize metadata manager.

        Args:
            storage_base: Base storage directory (database goes here)
            db_name: Database filename
        """
        self.logger = logging.getLogger(__name__)
        self.db_path = storage_base / db_name
        self._connection: Optional[sqlite3.Connection] = None

        # Guards the shared connection: writes hold it for the whole
        # transaction, reads wait until no transaction is open
        self._lock = threading.Lock()

        self._initialize_db()

        self.logger.info(f"Metadata manager initialized (db: {self.db_path})")

    def _initialize_db(self) -> None:
        """Create database and tables if they don't exist"""
        try:
            conn = self._get_connection()
            for statement in SCHEMA:
                conn.execute(statement)
            self.logger.debug("Database schema initialized")

        except sqlite3.Error as e:
            raise StorageUnavailableError(f"Failed to initialize database: {e}") from e

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection (reuses existing or creates new)"""
        if self._connection is None:
            try:
                self._connection = sqlite3.connect(
                    str(self.db_path),
                    timeout=SQLITE_TIMEOUT_SECONDS,
                    check_same_thread=False,  # Service writes from worker threads
                    isolation_level=None,  # Transactions are explicit
                )
                # Return rows as dictionaries
                self._connection.row_factory = sqlite3.Row
            except sqlite3.Error as e:
                raise StorageUnavailableError(
                    f"Failed to connect to database: {e}",
                ) from e

        return self._connection

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Run a write transaction under the write lock.

        Commits on success, rolls back on any exception and re-raises.
        """
        with self._lock:
            conn = self._get_connection()
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    @contextmanager
    def _reading(self) -> Iterator[sqlite3.Connection]:
        """Shared connection for a read, outside any open transaction"""
        with self._lock:
            yield self._get_connection()

    # =========================================================================
    # WRITES
    # =========================================================================

    def insert_session(self, session: Session, payload: bytes) -> None:
        """
        Insert session row, its thumbnails and its payload.

        All three tables are written in one transaction.

        Raises:
            StorageUnavailableError: If any part of the write fails
        """
        data = session.to_dict()
        try:
            with self._transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO sessions (
                        id, blob_key, created_at, duration, thumbnail,
                        saved, name, trim_in, trim_out
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        data["id"],
                        data["blob_key"],
                        data["created_at"],
                        data["duration"],
                        data["thumbnail"],
                        data["saved"],
                        data["name"],
                        data["trim_in"],
                        data["trim_out"],
                    ),
                )
                self._write_thumbnails(conn, session)
                conn.execute(
                    "INSERT INTO payloads (id, data) VALUES (?, ?)",
                    (session.blob_key, payload),
                )

            self.logger.debug(
                f"Inserted session: {session.id} "
                f"({len(session.thumbnails)} thumbnails, {len(payload)} bytes)",
            )

        except sqlite3.Error as e:
            raise StorageUnavailableError(f"Failed to save session: {e}") from e

    def update_session(self, session: Session) -> None:
        """
        Rewrite a session's metadata and thumbnails.

        Raises:
            SessionNotFoundError: If no row has this id
            StorageError: If update fails
        """
        data = session.to_dict()
        try:
            with self._transaction() as conn:
                cursor = conn.execute(
                    """
                    UPDATE sessions SET
                        created_at = ?,
                        duration = ?,
                        thumbnail = ?,
                        saved = ?,
                        name = ?,
                        trim_in = ?,
                        trim_out = ?
                    WHERE id = ?
                    """,
                    (
                        data["created_at"],
                        data["duration"],
                        data["thumbnail"],
                        data["saved"],
                        data["name"],
                        data["trim_in"],
                        data["trim_out"],
                        session.id,
                    ),
                )
                if cursor.rowcount == 0:
                    raise SessionNotFoundError(f"Session not found: {session.id}")

                conn.execute(
                    "DELETE FROM thumbnails WHERE session_id = ?",
                    (session.id,),
                )
                self._write_thumbnails(conn, session)

            self.logger.debug(f"Updated session: {session.id}")

        except sqlite3.Error as e:
            raise StorageError(f"Failed to update session: {e}") from e

    def delete_session(self, session_id: str) -> bool:
        """
        Delete a session, its thumbnails and its payload in one transaction.

        Returns:
            True if a session row was removed, False if it did not exist
        """
        try:
            with self._transaction() as conn:
                cursor = conn.execute(
                    "DELETE FROM sessions WHERE id = ?",
                    (session_id,),
                )
                conn.execute(
                    "DELETE FROM thumbnails WHERE session_id = ?",
                    (session_id,),
                )
                conn.execute("DELETE FROM payloads WHERE id = ?", (session_id,))
                removed = cursor.rowcount > 0

        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete session: {e}") from e

        if removed:
            self.logger.debug(f"Deleted session from database: {session_id}")
        return removed

    def delete_all(self) -> int:
        """Delete every session; returns how many there were"""
        try:
            with self._transaction() as conn:
                count = conn.execute("SELECT COUNT(*) AS count FROM sessions").fetchone()
                conn.execute("DELETE FROM sessions")
                conn.execute("DELETE FROM thumbnails")
                conn.execute("DELETE FROM payloads")

        except sqlite3.Error as e:
            raise StorageError(f"Failed to clear sessions: {e}") from e

        return count["count"] if count else 0

    @staticmethod
    def _write_thumbnails(conn: sqlite3.Connection, session: Session) -> None:
        conn.executemany(
            """
            INSERT INTO thumbnails (session_id, position, time, image)
            VALUES (?, ?, ?, ?)
            """,
            [
                (session.id, position, thumb.time, thumb.image)
                for position, thumb in enumerate(session.thumbnails)
            ],
        )

    # =========================================================================
    # READS
    # =========================================================================

    def get_session(self, session_id: str) -> Optional[Session]:
        """
        Get session by id, thumbnails included.

        Returns:
            Session or None if not found
        """
        try:
            with self._reading() as conn:
                row = conn.execute(
                    "SELECT * FROM sessions WHERE id = ?",
                    (session_id,),
                ).fetchone()

                if row:
                    thumbnails = self._load_thumbnails(conn, session_id)
                    return Session.from_dict(dict(row), thumbnails)
                return None

        except sqlite3.Error as e:
            raise StorageError(f"Failed to get session: {e}") from e

    def get_payload(self, session_id: str) -> Optional[bytes]:
        """Get recorded media bytes, or None if not found"""
        try:
            with self._reading() as conn:
                row = conn.execute(
                    "SELECT data FROM payloads WHERE id = ?",
                    (session_id,),
                ).fetchone()

                return bytes(row["data"]) if row else None

        except sqlite3.Error as e:
            raise StorageError(f"Failed to get payload: {e}") from e

    def list_sessions(
        self,
        saved: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> List[Session]:
        """
        List sessions newest first.

        Args:
            saved: True = saved only, False = recent only, None = all
            limit: Maximum number of sessions

        Returns:
            List of Session objects
        """
        try:
            with self._reading() as conn:

                query = "SELECT * FROM sessions"
                params: List[Union[int, float]] = []

                if saved is not None:
                    query += " WHERE saved = ?"
                    params.append(1 if saved else 0)

                query += " ORDER BY created_at DESC"

                if limit is not None:
                    query += " LIMIT ?"
                    params.append(limit)

                rows = conn.execute(query, params).fetchall()
                return [
                    Session.from_dict(dict(row), self._load_thumbnails(conn, row["id"]))
                    for row in rows
                ]

        except sqlite3.Error as e:
            raise StorageError(f"Failed to list sessions: {e}") from e

    def get_stats(self) -> StorageStats:
        """Aggregate counts, durations and payload size"""
        try:
            with self._reading() as conn:
                stats = StorageStats()

                rows = conn.execute(
                    """
                    SELECT saved, COUNT(*) AS count, COALESCE(SUM(duration), 0) AS total
                    FROM sessions
                    GROUP BY saved
                    """,
                ).fetchall()
                for row in rows:
                    if row["saved"]:
                        stats.saved_count = row["count"]
                        stats.saved_duration_seconds = row["total"]
                    else:
                        stats.recent_count = row["count"]
                        stats.recent_duration_seconds = row["total"]

                row = conn.execute(
                    "SELECT COALESCE(SUM(LENGTH(data)), 0) AS size FROM payloads",
                ).fetchone()
                stats.payload_bytes = row["size"] if row else 0

                return stats

        except sqlite3.Error as e:
            raise StorageError(f"Failed to get stats: {e}") from e

    @staticmethod
    def _load_thumbnails(conn: sqlite3.Connection, session_id: str) -> List[Thumbnail]:
        rows = conn.execute(
            """
            SELECT time, image FROM thumbnails
            WHERE session_id = ?
            ORDER BY position
            """,
            (session_id,),
        ).fetchall()
        return [Thumbnail(time=row["time"], image=bytes(row["image"])) for row in rows]

    def cleanup(self) -> None:
        """Close database connection"""
        if self._connection:
            try:
                self._connection.close()
                self._connection = None
                self.logger.debug("Database connection closed")
            except sqlite3.Error as e:
                self.logger.warning(f"Error closing database: {e}")
