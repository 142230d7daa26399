"""
Storage Configuration Handler

Manages YAML configuration file for storage settings.
Provides defaults and validation.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from config.settings import (
    MAX_RECENT_DURATION_SECONDS,
    RECENT_SESSIONS_LIMIT,
    SESSION_DB_NAME,
    STORAGE_BASE_PATH,
)


class StorageConfig:
    """
    Storage configuration with YAML file support.

    Reads from config/storage.yaml if it exists,
    otherwise uses defaults from config/settings.py.

    Usage:
        config = StorageConfig()
        base_path = config.storage_base_path
        budget = config.max_recent_duration_seconds
    """

    # Default config file location
    DEFAULT_CONFIG_PATH = Path("config/storage.yaml")

    def __init__(self, config_path: Optional[Path] = None, create_if_missing: bool = True):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file (None = use default)
            create_if_missing: Write a default file when none exists
        """
        self.logger = logging.getLogger(__name__)
        self.config_path = Path(config_path or self.DEFAULT_CONFIG_PATH)
        self.create_if_missing = create_if_missing

        # Load configuration (defaults + file overrides)
        self._config = self._load_config()

        self.logger.info(f"Storage config loaded from {self.config_path}")

    def _get_defaults(self) -> Dict[str, Any]:
        """Get default configuration values from settings"""
        return {
            # Paths
            "storage_base_path": str(STORAGE_BASE_PATH),
            "allow_relative_paths": True,
            "db_name": SESSION_DB_NAME,

            # Retention
            "max_recent_duration_seconds": MAX_RECENT_DURATION_SECONDS,
            "recent_sessions_limit": RECENT_SESSIONS_LIMIT,
        }

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file or use defaults"""
        config = self._get_defaults()

        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    file_config = yaml.safe_load(f) or {}

                # File overrides defaults
                config.update(file_config)

                self.logger.info(f"Loaded config from {self.config_path}")

            except (OSError, yaml.YAMLError) as e:
                self.logger.warning(
                    f"Failed to load config from {self.config_path}: {e}. "
                    f"Using defaults.",
                )
        elif self.create_if_missing:
            self.logger.info(
                f"Config file not found at {self.config_path}. "
                f"Using defaults. Creating default config file...",
            )
            self._save_config(config)

        self._validate_config(config)

        return config

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate configuration values"""
        storage_path = Path(config["storage_base_path"])
        if not storage_path.is_absolute() and not config["allow_relative_paths"]:
            raise ValueError(
                f"storage_base_path must be absolute path: {storage_path}",
            )

        if config["max_recent_duration_seconds"] < 0:
            raise ValueError("max_recent_duration_seconds cannot be negative")

        if config["recent_sessions_limit"] <= 0:
            raise ValueError("recent_sessions_limit must be positive")

        if config["max_recent_duration_seconds"] == 0:
            self.logger.warning(
                "max_recent_duration_seconds is 0: only the newest unsaved "
                "session will be kept",
            )

    def _save_config(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Save configuration to YAML file"""
        if config is None:
            config = self._config

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.config_path, "w") as f:
                yaml.dump(
                    config,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    indent=2,
                )

            self.logger.info(f"Config saved to {self.config_path}")

        except OSError as e:
            self.logger.error(f"Failed to save config: {e}")

    # =========================================================================
    # PROPERTY ACCESSORS
    # =========================================================================

    @property
    def storage_base_path(self) -> Path:
        """Get storage base directory as Path object"""
        return Path(self._config["storage_base_path"])

    @property
    def db_name(self) -> str:
        """Database filename inside the storage directory"""
        return self._config["db_name"]

    @property
    def max_recent_duration_seconds(self) -> float:
        """Duration budget for unsaved sessions"""
        return self._config["max_recent_duration_seconds"]

    @property
    def recent_sessions_limit(self) -> int:
        """Default page size for recent-session listings"""
        return self._config["recent_sessions_limit"]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key"""
        return self._config.get(key, default)

    def set(self, key: str, value: Any, save: bool = True) -> None:
        """
        Set configuration value.

        Args:
            key: Configuration key
            value: New value
            save: If True, save to file immediately
        """
        self._config[key] = value

        if save:
            self._save_config()

    def reload(self) -> None:
        """Reload configuration from file"""
        self._config = self._load_config()
        self.logger.info("Configuration reloaded")

    def to_dict(self) -> Dict[str, Any]:
        """Get configuration as dictionary"""
        return self._config.copy()

    def __repr__(self) -> str:
        """Human-readable representation"""
        return f"StorageConfig(path={self.config_path})"
