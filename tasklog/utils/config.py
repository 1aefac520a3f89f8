"""
Configuration management for tasklog.

This module handles user configuration and resolves the database location.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, cast

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

# Environment variable overriding the database location
DB_PATH_ENV_VAR = "TASKLOG_DB_PATH"

# Database file name used in the current directory when nothing else is set
DEFAULT_DB_FILENAME = "tasklog.db"


class ConfigManager:
    """Manages tasklog configuration."""

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        """Initialize configuration manager."""
        self.app_name = "tasklog"
        self.config_dir = Path(config_dir or user_config_dir(self.app_name))
        self.config_file = self.config_dir / "config.json"

        # Default configuration
        self.default_config: Dict[str, Any] = {
            "database_path": None,
            "break_time_name": "break time",
            "confirm_destructive": True,
        }

        # Load existing configuration
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file, falling back to defaults."""
        config = self.default_config.copy()
        if self.config_file.exists():
            try:
                with open(self.config_file, "r") as f:
                    config.update(json.load(f))
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Could not load config file {self.config_file}: {e}")
        return config

    def _save_config(self, config: Dict[str, Any]) -> None:
        """Save configuration to file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w") as f:
                json.dump(config, f, indent=2, sort_keys=True)
        except IOError as e:
            logger.warning(f"Could not save config file {self.config_file}: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by key, with optional default."""
        keys = key.split(".")
        value: Any = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by key."""
        keys = key.split(".")
        config = self._config

        # Navigate to the parent dictionary
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        self._save_config(self._config)

    def get_db_path(self) -> Path:
        """
        Resolve the database file location.

        The TASKLOG_DB_PATH environment variable wins, then the database_path
        setting, then tasklog.db in the current directory.
        """
        env_path = os.environ.get(DB_PATH_ENV_VAR)
        if env_path:
            return Path(env_path)

        configured = self.get("database_path")
        if configured:
            return Path(configured).expanduser()

        return Path.cwd() / DEFAULT_DB_FILENAME

    def get_break_time_name(self) -> str:
        """Get the task name used for breaks."""
        return cast(str, self.get("break_time_name", "break time"))

    def should_confirm_destructive(self) -> bool:
        """Check whether delete and reset operations ask for confirmation."""
        return cast(bool, self.get("confirm_destructive", True))

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self._config = self.default_config.copy()
        self._save_config(self._config)


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
