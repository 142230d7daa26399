"""
Storage Module Enums

Type definitions for the storage module.
Configuration values live in config/settings.py following the
"ALL config in config/settings.py" principle.

This module contains only Enum types and fixed schema facts that define
the type system for storage operations.
"""

from enum import Enum

# =============================================================================
# ENUMS
# =============================================================================


class SessionListing(Enum):
    """Which sessions a listing returns"""

    RECENT = "recent"  # Unsaved, prune-eligible
    SAVED = "saved"  # Starred, retained indefinitely
    ALL = "all"


class StorageState(Enum):
    """Overall storage system states"""

    UNINITIALIZED = "uninitialized"  # initialize() not called yet
    READY = "ready"  # Normal operation
    ERROR = "error"  # Storage system error


# =============================================================================
# SCHEMA
# =============================================================================

# Session fields a caller may change through update()
UPDATABLE_FIELDS = frozenset(
    {
        "created_at",
        "duration",
        "thumbnail",
        "thumbnails",
        "saved",
        "name",
        "trim_in",
        "trim_out",
    },
)

# Fields that are fixed once a session exists
IMMUTABLE_FIELDS = frozenset({"id", "blob_key"})
