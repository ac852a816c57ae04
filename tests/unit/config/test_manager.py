"""Tests for configuration manager functionality."""

import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml
from pydantic import ValidationError

from branchtime.config.manager import ConfigManager
from branchtime.config.schema import BranchTimeConfig, TimezoneSettings
from branchtime.utils.core.exceptions import ConfigurationError, ErrorCategory
from tests.utils.test_helpers import (
    create_config_manager_with_config,
    create_temp_config_file,
    create_temp_directory,
)


class TestConfigManager:
    """Test cases for ConfigManager file handling."""

    def test_load_config_success(self, base_config: BranchTimeConfig) -> None:
        """Test successful configuration loading."""
        config_data: dict[str, object] = {
            "timezone": {
                "multi_timezone_enabled": base_config.timezone.multi_timezone_enabled,
                "retailer_timezone_id": base_config.timezone.retailer_timezone_id,
                "branch_timezone_id": base_config.timezone.branch_timezone_id,
            },
        }

        with create_temp_config_file(config_data) as temp_config_file:
            config = ConfigManager.load_config(temp_config_file)

            assert isinstance(config, BranchTimeConfig)
            assert config == base_config

    def test_load_config_flat_settings_keys(self) -> None:
        """Test that settings-store keys at top level fold into the timezone section."""
        config_data: dict[str, object] = {
            "net.citigo.userdefault.isUsingMultiTimezone": True,
            "net.citigo.userdefault.currentBranchTimezoneIdentifier": "Asia/Tokyo",
        }

        with create_temp_config_file(config_data) as temp_config_file:
            config = ConfigManager.load_config(temp_config_file)

        assert config.timezone.multi_timezone_enabled is True
        assert config.timezone.branch_timezone_id == "Asia/Tokyo"

    def test_load_config_nested_values_win_over_flat_keys(self) -> None:
        """Test that explicit nested values override flat settings-store keys."""
        config_data: dict[str, object] = {
            "net.citigo.userdefault.currentBranchTimezoneIdentifier": "Asia/Tokyo",
            "timezone": {"branch_timezone_id": "Asia/Bangkok"},
        }

        with create_temp_config_file(config_data) as temp_config_file:
            config = ConfigManager.load_config(temp_config_file)

        assert config.timezone.branch_timezone_id == "Asia/Bangkok"

    def test_load_config_empty_file(self) -> None:
        """Test that an empty file yields the default configuration."""
        with create_temp_directory() as temp_dir:
            empty_file = temp_dir / "empty.yml"
            _ = empty_file.write_text("", encoding="utf-8")

            config = ConfigManager.load_config(empty_file)

        assert config == ConfigManager.get_default_config()

    def test_load_config_file_not_found(self) -> None:
        """Test loading config when file doesn't exist."""
        non_existent_path = Path("/non/existent/config.yml")

        with pytest.raises(FileNotFoundError):
            _ = ConfigManager.load_config(non_existent_path)

    def test_load_config_invalid_yaml(self) -> None:
        """Test loading config with invalid YAML syntax."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yml", delete=False) as f:
            _ = f.write("invalid: yaml: content: [")
            invalid_yaml_path = Path(f.name)

        try:
            with pytest.raises(yaml.YAMLError):
                _ = ConfigManager.load_config(invalid_yaml_path)
        finally:
            invalid_yaml_path.unlink(missing_ok=True)

    def test_load_config_not_a_dictionary(self) -> None:
        """Test loading config whose top level is a list."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yml", delete=False) as f:
            _ = f.write("- a\n- b\n")
            list_yaml_path = Path(f.name)

        try:
            with pytest.raises(ConfigurationError, match="YAML dictionary") as exc_info:
                _ = ConfigManager.load_config(list_yaml_path)

            assert exc_info.value.category == ErrorCategory.CONFIGURATION
            assert exc_info.value.context == str(list_yaml_path)
        finally:
            list_yaml_path.unlink(missing_ok=True)

    def test_load_config_validation_error(self) -> None:
        """Test loading config with validation errors."""
        invalid_config_data: dict[str, object] = {
            "timezone": {"multi_timezone_enabled": "not-a-bool"},
        }

        with create_temp_config_file(invalid_config_data) as invalid_config_file:
            with pytest.raises(ValidationError):
                _ = ConfigManager.load_config(invalid_config_file)

    def test_save_config_success(self, base_config: BranchTimeConfig) -> None:
        """Test successful configuration saving."""
        with create_temp_directory() as temp_dir:
            config_path = temp_dir / "config.yml"

            ConfigManager.save_config(base_config, config_path)

            assert config_path.exists()
            assert ConfigManager.load_config(config_path) == base_config
            assert list(temp_dir.glob("*.tmp")) == []

    def test_save_config_missing_directory(self, base_config: BranchTimeConfig) -> None:
        """Test that saving into a missing directory raises OSError."""
        with create_temp_directory() as temp_dir:
            config_path = temp_dir / "missing" / "config.yml"

            with pytest.raises(OSError):
                ConfigManager.save_config(base_config, config_path)

    def test_validate_config(self, base_config: BranchTimeConfig) -> None:
        """Test validation of a valid configuration."""
        assert ConfigManager.validate_config(base_config) is True

    def test_create_sample_config(self) -> None:
        """Test that the sample configuration loads as the default configuration."""
        with create_temp_directory() as temp_dir:
            sample_path = temp_dir / "nested" / "config.yml.sample"

            ConfigManager.create_sample_config(sample_path)

            assert sample_path.exists()
            content = sample_path.read_text(encoding="utf-8")
            assert "multi_timezone_enabled" in content
            assert ConfigManager.load_config(sample_path) == ConfigManager.get_default_config()


class TestLiveConfiguration:
    """Test cases for runtime configuration management."""

    def test_get_current_config_unset(self) -> None:
        """Test that reading an unset configuration raises RuntimeError."""
        manager = ConfigManager()

        with pytest.raises(RuntimeError):
            _ = manager.get_current_config()

    def test_set_and_get_current_config(self, base_config: BranchTimeConfig) -> None:
        """Test that the configuration set is the one returned."""
        manager = create_config_manager_with_config(base_config)

        assert manager.get_current_config() == base_config
        assert manager.get_timezone_settings() == base_config.timezone

    def test_update_runtime_config_notifies_callbacks(
        self, base_config: BranchTimeConfig
    ) -> None:
        """Test that callbacks receive the old and new configuration."""
        manager = create_config_manager_with_config(base_config)
        callback = MagicMock()
        manager.register_change_callback(callback)
        new_config = ConfigManager.get_default_config()

        manager.update_runtime_config(new_config)

        callback.assert_called_once_with(base_config, new_config)
        assert manager.get_current_config() == new_config

    def test_register_callback_only_once(self, base_config: BranchTimeConfig) -> None:
        """Test that registering the same callback twice calls it once."""
        manager = create_config_manager_with_config(base_config)
        callback = MagicMock()
        manager.register_change_callback(callback)
        manager.register_change_callback(callback)

        manager.update_runtime_config(ConfigManager.get_default_config())

        assert callback.call_count == 1

    def test_unregister_callback(self, base_config: BranchTimeConfig) -> None:
        """Test that unregistered callbacks are no longer called."""
        manager = create_config_manager_with_config(base_config)
        callback = MagicMock()
        manager.register_change_callback(callback)
        manager.unregister_change_callback(callback)

        manager.update_runtime_config(ConfigManager.get_default_config())

        callback.assert_not_called()

    def test_failing_callback_does_not_block_others(
        self, base_config: BranchTimeConfig
    ) -> None:
        """Test that an exception in one callback does not stop the others."""
        manager = create_config_manager_with_config(base_config)
        failing = MagicMock(side_effect=RuntimeError("boom"))
        succeeding = MagicMock()
        manager.register_change_callback(failing)
        manager.register_change_callback(succeeding)

        manager.update_runtime_config(ConfigManager.get_default_config())

        failing.assert_called_once()
        succeeding.assert_called_once()

    def test_switch_branch(self, base_config: BranchTimeConfig) -> None:
        """Test that a branch switch replaces only the branch identifier."""
        manager = create_config_manager_with_config(base_config)

        new_config = manager.switch_branch("Asia/Bangkok")

        assert new_config.timezone.branch_timezone_id == "Asia/Bangkok"
        assert new_config.timezone.retailer_timezone_id == base_config.timezone.retailer_timezone_id
        assert manager.get_timezone_settings().branch_timezone_id == "Asia/Bangkok"
        assert base_config.timezone.branch_timezone_id == "Asia/Tokyo"

    @pytest.mark.parametrize(
        ("branch_id", "expected"),
        [("  Asia/Bangkok  ", "Asia/Bangkok"), ("   ", None), (None, None)],
    )
    def test_switch_branch_normalizes_identifier(
        self, base_config: BranchTimeConfig, branch_id: str | None, expected: str | None
    ) -> None:
        """Test that a branch switch runs the identifier validators."""
        manager = create_config_manager_with_config(base_config)

        new_config = manager.switch_branch(branch_id)

        assert new_config.timezone.branch_timezone_id == expected
        assert manager.get_timezone_settings().branch_timezone_id == expected

    def test_config_file_path_property(self) -> None:
        """Test setting and clearing the config file path."""
        manager = ConfigManager()
        assert manager.config_file_path is None

        manager.config_file_path = Path("config.yml")
        assert manager.config_file_path == Path("config.yml")

        del manager.config_file_path
        assert manager.config_file_path is None

    def test_settings_snapshot_is_immutable(self, base_config: BranchTimeConfig) -> None:
        """Test that readers receive snapshots that cannot be changed in place."""
        manager = create_config_manager_with_config(base_config)
        settings: TimezoneSettings = manager.get_timezone_settings()

        with pytest.raises(ValidationError):
            settings.branch_timezone_id = "Asia/Bangkok"  # pyright: ignore[reportAttributeAccessIssue]
