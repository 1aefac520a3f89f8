"""
Tests for configuration management (tasklog.utils.config).
"""

import json
from pathlib import Path

import pytest

from tasklog.utils import config as config_module
from tasklog.utils.config import DB_PATH_ENV_VAR, ConfigManager, get_config_manager


@pytest.fixture
def config_manager(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    """Provide a config manager in a temporary directory without env overrides."""
    monkeypatch.delenv(DB_PATH_ENV_VAR, raising=False)
    return ConfigManager(config_dir=temp_dir / "config")


class TestConfigManager:
    """Test cases for ConfigManager class."""

    def test_defaults(self, config_manager: ConfigManager) -> None:
        """Test values without a config file."""
        assert config_manager.get("database_path") is None
        assert config_manager.get_break_time_name() == "break time"
        assert config_manager.should_confirm_destructive() is True
        assert config_manager.get("missing.key", "fallback") == "fallback"

    def test_set_persists(self, config_manager: ConfigManager) -> None:
        """Test that set writes the config file and a new manager reads it."""
        # Act
        config_manager.set("break_time_name", "lunch")

        # Assert
        data = json.loads(config_manager.config_file.read_text())
        assert data["break_time_name"] == "lunch"

        reloaded = ConfigManager(config_dir=config_manager.config_dir)
        assert reloaded.get_break_time_name() == "lunch"

    def test_nested_set_and_get(self, config_manager: ConfigManager) -> None:
        """Test dotted keys."""
        config_manager.set("display.color", False)
        assert config_manager.get("display.color") is False

    def test_invalid_config_file_falls_back_to_defaults(self, temp_dir: Path) -> None:
        """Test that a corrupt file does not break loading."""
        # Arrange
        config_dir = temp_dir / "config"
        config_dir.mkdir()
        (config_dir / "config.json").write_text("{not json")

        # Act
        manager = ConfigManager(config_dir=config_dir)

        # Assert
        assert manager.get_break_time_name() == "break time"

    def test_reset_to_defaults(self, config_manager: ConfigManager) -> None:
        """Test resetting the configuration."""
        config_manager.set("confirm_destructive", False)

        config_manager.reset_to_defaults()

        assert config_manager.should_confirm_destructive() is True


class TestDatabasePath:
    """Test cases for database path resolution."""

    def test_defaults_to_current_directory(
        self, config_manager: ConfigManager, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test the fallback location."""
        monkeypatch.chdir(temp_dir)
        assert config_manager.get_db_path().resolve() == (temp_dir / "tasklog.db").resolve()

    def test_config_setting(self, config_manager: ConfigManager, temp_dir: Path) -> None:
        """Test the database_path setting."""
        config_manager.set("database_path", str(temp_dir / "work.db"))
        assert config_manager.get_db_path() == temp_dir / "work.db"

    def test_config_setting_expands_home(
        self, config_manager: ConfigManager, monkeypatch: pytest.MonkeyPatch, temp_dir: Path
    ) -> None:
        """Test that a leading ~ is expanded."""
        monkeypatch.setenv("HOME", str(temp_dir))
        config_manager.set("database_path", "~/tasks.db")
        assert config_manager.get_db_path() == temp_dir / "tasks.db"

    def test_environment_wins(
        self, config_manager: ConfigManager, monkeypatch: pytest.MonkeyPatch, temp_dir: Path
    ) -> None:
        """Test that the environment variable overrides the setting."""
        config_manager.set("database_path", str(temp_dir / "work.db"))
        monkeypatch.setenv(DB_PATH_ENV_VAR, str(temp_dir / "env.db"))

        assert config_manager.get_db_path() == temp_dir / "env.db"


class TestGlobalConfig:
    """Test cases for the module-level accessors."""

    def test_get_config_manager_is_shared(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the global manager is created once."""
        monkeypatch.setattr(config_module, "_config_manager", None)

        assert get_config_manager() is get_config_manager()
