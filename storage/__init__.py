"""
Storage Module

Session storage for the practice recorder: atomic save/delete of recorded
blocks and duration-budgeted retention of unsaved sessions.

Architecture mirrors the recording module:
- interfaces/: Abstract base classes (contracts)
- implementations/: Concrete implementations (real and mock)
- controllers/: High-level coordination
- managers/: Specialized domain logic (SQL, pruning)
- models/: Data structures
"""

from storage.constants import SessionListing, StorageState
from storage.controllers.storage_controller import StorageController
from storage.factory import StorageFactory, create_storage
from storage.interfaces.storage_interface import (
    SessionNotFoundError,
    SessionStoreInterface,
    StorageError,
    StorageUnavailableError,
)
from storage.models.session import Session, SessionDraft, StorageStats, Thumbnail

# Public API - what users import
__all__ = [
    "Session",
    "SessionDraft",
    "SessionListing",
    "SessionNotFoundError",
    # Interfaces
    "SessionStoreInterface",
    # Main controller (primary API)
    "StorageController",
    "StorageError",
    # Factory for creating storage
    "StorageFactory",
    "StorageState",
    "StorageStats",
    "StorageUnavailableError",
    "Thumbnail",
    "create_storage",
]
