"""
Session Models

Data classes representing recorded sessions and their metadata.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Optional

from storage.constants import IMMUTABLE_FIELDS, UPDATABLE_FIELDS


@dataclass(frozen=True)
class Thumbnail:
    """
    A preview frame captured during a block.

    time is seconds since the block started.
    """

    time: float
    image: bytes


@dataclass
class SessionDraft:
    """
    Session metadata before it has been persisted.

    The store assigns the id when the draft is written.
    """

    created_at: float  # Block start (epoch seconds)
    duration: float  # Measured seconds
    thumbnail: bytes = b""  # First preview frame
    thumbnails: List[Thumbnail] = field(default_factory=list)
    saved: bool = False
    name: Optional[str] = None
    trim_in: Optional[float] = None
    trim_out: Optional[float] = None

    def to_session(self, session_id: str) -> "Session":
        """Attach an id, producing the persisted form"""
        return Session(
            id=session_id,
            blob_key=session_id,
            created_at=self.created_at,
            duration=self.duration,
            thumbnail=self.thumbnail,
            thumbnails=list(self.thumbnails),
            saved=self.saved,
            name=self.name,
            trim_in=self.trim_in,
            trim_out=self.trim_out,
        )


@dataclass(frozen=True)
class Session:
    """
    A finalized recording block.

    Lifecycle: recent (saved=False, prune-eligible) -> saved (kept) -> deleted

    blob_key always equals id: the payload record is keyed by the session.
    Instances are immutable; use merged() for a changed copy.
    """

    id: str
    created_at: float
    duration: float
    blob_key: str = ""
    thumbnail: bytes = b""
    thumbnails: List[Thumbnail] = field(default_factory=list)
    saved: bool = False
    name: Optional[str] = None
    trim_in: Optional[float] = None
    trim_out: Optional[float] = None

    def __post_init__(self):
        """blob_key is derived from id"""
        object.__setattr__(self, "blob_key", self.id)

    @property
    def is_trimmed(self) -> bool:
        """Check if a trim range is set"""
        return self.trim_in is not None and self.trim_out is not None

    @property
    def created_datetime(self) -> datetime:
        """created_at as local datetime"""
        return datetime.fromtimestamp(self.created_at)

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage (thumbnails excluded)"""
        return {
            "id": self.id,
            "blob_key": self.blob_key,
            "created_at": self.created_at,
            "duration": self.duration,
            "thumbnail": self.thumbnail,
            "saved": 1 if self.saved else 0,
            "name": self.name,
            "trim_in": self.trim_in,
            "trim_out": self.trim_out,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        thumbnails: Optional[List[Thumbnail]] = None,
    ) -> "Session":
        """Create Session from dictionary (database row)"""
        return cls(
            id=data["id"],
            created_at=float(data["created_at"]),
            duration=float(data["duration"]),
            thumbnail=bytes(data.get("thumbnail") or b""),
            thumbnails=thumbnails or [],
            saved=bool(data.get("saved", 0)),
            name=data.get("name"),
            trim_in=data.get("trim_in"),
            trim_out=data.get("trim_out"),
        )

    def merged(self, **patch) -> "Session":
        """
        Copy with fields replaced.

        id and blob_key are kept; unknown fields raise ValueError. The
        thumbnail list is always copied.
        """
        unknown = set(patch) - UPDATABLE_FIELDS - IMMUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown session fields: {', '.join(sorted(unknown))}")

        changes = {k: v for k, v in patch.items() if k not in IMMUTABLE_FIELDS}
        changes["thumbnails"] = list(changes.get("thumbnails", self.thumbnails))
        return replace(self, **changes)

    def summary(self) -> str:
        """One-line description for logs and the CLI"""
        started = self.created_datetime.strftime("%Y-%m-%d %H:%M:%S")
        line = f"{self.id}  {started}  {self.duration:7.1f}s"
        if self.saved:
            line += f"  [saved] {self.name or ''}"
        if self.is_trimmed:
            line += f"  trim {self.trim_in:.1f}-{self.trim_out:.1f}"
        return line

    def __repr__(self) -> str:
        """Human-readable representation"""
        return (
            f"Session(id='{self.id}', "
            f"duration={self.duration:.1f}, "
            f"saved={self.saved})"
        )


@dataclass
class StorageStats:
    """
    Session store statistics.

    Used for the STATUS command and the CLI.
    """

    recent_count: int = 0
    saved_count: int = 0
    recent_duration_seconds: float = 0.0
    saved_duration_seconds: float = 0.0
    payload_bytes: int = 0

    @property
    def total_sessions(self) -> int:
        return self.recent_count + self.saved_count

    @property
    def payload_mb(self) -> float:
        """Payload size in megabytes"""
        return self.payload_bytes / (1024 * 1024)

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/display"""
        return {
            "recent_count": self.recent_count,
            "saved_count": self.saved_count,
            "total_sessions": self.total_sessions,
            "recent_duration_seconds": round(self.recent_duration_seconds, 1),
            "saved_duration_seconds": round(self.saved_duration_seconds, 1),
            "payload_mb": round(self.payload_mb, 2),
        }

    def __repr__(self) -> str:
        """Human-readable representation"""
        return (
            f"StorageStats(recent={self.recent_count}, "
            f"saved={self.saved_count}, "
            f"payload={self.payload_mb:.1f}MB)"
        )
