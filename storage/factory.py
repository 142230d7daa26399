"""
Storage Factory

Factory pattern for creating session store implementations.
Follows the same pattern as recording/factory.py.
"""

import logging
from typing import Literal, Optional

from storage.config import StorageConfig
from storage.implementations.local_storage import LocalStorage
from storage.implementations.mock_storage import MockStorage
from storage.interfaces.storage_interface import SessionStoreInterface

# Type alias for better type hints
StorageMode = Literal["auto", "real", "mock"]


class StorageFactory:
    """
    Factory for creating session store implementations.

    Usage:
        # Auto-detect (uses real storage)
        storage = StorageFactory.create_storage()

        # Force mock mode (useful for testing)
        storage = StorageFactory.create_storage(mode="mock")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_storage(
        cls,
        mode: StorageMode = "auto",
        config: Optional[StorageConfig] = None,
    ) -> SessionStoreInterface:
        """
        Create a session store instance.

        Args:
            mode: "auto" (use real), "real" (force real), "mock" (force simulation)
            config: StorageConfig object (None = settings defaults)

        Returns:
            SessionStoreInterface implementation (LocalStorage or MockStorage)
        """
        if mode == "mock":
            cls._logger.info("Creating Mock Storage (forced)")
            return MockStorage()

        # "auto" or "real" - both use real storage; availability is
        # decided by initialize(), not here
        cls._logger.info("Creating Local Storage")
        if config is None:
            return LocalStorage()
        return LocalStorage(base_path=config.storage_base_path, db_name=config.db_name)


def create_storage(
    force_mock: bool = False,
    config: Optional[StorageConfig] = None,
) -> SessionStoreInterface:
    """
    Quick storage creation with simple mock override.

    Example:
        storage = create_storage()
        storage = create_storage(force_mock=True)
    """
    mode: StorageMode = "mock" if force_mock else "auto"
    return StorageFactory.create_storage(mode=mode, config=config)
