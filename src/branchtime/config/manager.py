"""Configuration manager for branchtime.

This module provides functionality for loading, validating, and saving
YAML configuration files with Pydantic model validation. It also holds the
live configuration so a branch switch at runtime is seen by the next
resolver call.
"""

import logging
import tempfile
import threading
from pathlib import Path
from typing import Callable

import yaml

from ..config.schema import BranchTimeConfig, TimezoneSettings
from ..utils.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Configuration manager for handling YAML config files with Pydantic validation.

    Provides methods for loading, saving, and validating configuration files
    with atomic writes. Also supports live configuration management with
    change notifications; readers always receive an immutable snapshot.
    """

    def __init__(self) -> None:
        """Initialize the configuration manager."""
        self._current_config: BranchTimeConfig | None = None
        self._config_lock: threading.RLock = threading.RLock()
        self._change_callbacks: list[
            Callable[[BranchTimeConfig, BranchTimeConfig], None]
        ] = []
        self._config_file_path: Path | None = None

    @staticmethod
    def load_config(config_path: Path) -> BranchTimeConfig:
        """
        Load and validate configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            BranchTimeConfig: Validated configuration object

        Raises:
            FileNotFoundError: If the config file doesn't exist
            yaml.YAMLError: If the YAML syntax is invalid
            ConfigurationError: If the file does not hold a YAML mapping
            ValidationError: If the configuration fails Pydantic validation
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as f:
                raw_config_data: object = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if raw_config_data is None:
            config_data: dict[str, object] = {}
        elif isinstance(raw_config_data, dict):
            config_data = raw_config_data
        else:
            raise ConfigurationError(
                f"Configuration file must contain a YAML dictionary, got {type(raw_config_data).__name__}",
                context=str(config_path),
            )

        parsed_data = ConfigManager._parse_config_data(config_data)

        config = BranchTimeConfig(**parsed_data)

        logger.info(f"Loaded configuration from {config_path}")
        return config

    @staticmethod
    def _parse_config_data(config_data: dict[str, object]) -> dict[str, object]:
        """
        Fold flat settings-store keys into the nested configuration layout.

        Files exported straight from the client settings store carry the
        ``net.citigo.userdefault.*`` keys at top level; they are moved into
        the ``timezone`` section. Explicit nested values win.

        Args:
            config_data: Raw configuration data from YAML

        Returns:
            dict[str, object]: Parsed configuration data
        """
        parsed_data: dict[str, object] = {}
        flat_timezone: dict[str, object] = {}

        for key, value in config_data.items():
            match key:
                case TimezoneSettings.MULTI_TIMEZONE_KEY:
                    flat_timezone["multi_timezone_enabled"] = value
                case TimezoneSettings.RETAILER_TIMEZONE_KEY:
                    flat_timezone["retailer_timezone_id"] = value
                case TimezoneSettings.BRANCH_TIMEZONE_KEY:
                    flat_timezone["branch_timezone_id"] = value
                case _:
                    parsed_data[key] = value

        if flat_timezone:
            nested = parsed_data.get("timezone")
            if isinstance(nested, dict):
                flat_timezone.update(nested)
            parsed_data["timezone"] = flat_timezone

        return parsed_data

    @staticmethod
    def save_config(config: BranchTimeConfig, config_path: Path) -> None:
        """
        Save configuration to a YAML file with atomic operation.

        Args:
            config: Configuration object to save
            config_path: Path where to save the configuration

        Raises:
            OSError: If file operations fail
        """
        config_dict = config.model_dump()

        content_to_write = yaml.dump(
            config_dict,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            indent=2,
        )

        # Atomic save operation using temporary file
        temp_file = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=config_path.parent,
                prefix=f".{config_path.name}.",
                suffix=".tmp",
                delete=False,
            ) as temp_file:
                _ = temp_file.write(content_to_write)
                temp_file.flush()
                temp_path = Path(temp_file.name)

            _ = temp_path.replace(config_path)

        except Exception as e:
            if temp_file and Path(temp_file.name).exists():
                Path(temp_file.name).unlink(missing_ok=True)
            raise OSError(f"Failed to save configuration to {config_path}: {e}") from e

        logger.info(f"Saved configuration to {config_path}")

    @staticmethod
    def get_default_config() -> BranchTimeConfig:
        """
        Get a configuration object with default values.

        Returns:
            BranchTimeConfig: Single-timezone configuration with no branch or retailer zone
        """
        return BranchTimeConfig()

    @staticmethod
    def validate_config(config: BranchTimeConfig) -> bool:
        """
        Validate a configuration object.

        Args:
            config: Configuration object to validate

        Returns:
            bool: True if configuration is valid

        Raises:
            ValidationError: If configuration is invalid
        """
        _ = BranchTimeConfig(**config.model_dump())
        return True

    @staticmethod
    def create_sample_config(sample_path: Path) -> None:
        """
        Create a sample configuration file with all options and documentation.

        Args:
            sample_path: Path where to create the sample configuration file
        """
        _ = sample_path.parent.mkdir(parents=True, exist_ok=True)
        _ = sample_path.write_text(ConfigManager._generate_sample_content(), encoding="utf-8")

    @staticmethod
    def _generate_sample_content() -> str:
        """
        Generate sample configuration file content.

        Returns:
            str: Sample configuration file content
        """
        return """# branchtime configuration file

# ============================================================================
# Branch Timezone
# ============================================================================

timezone:
  # Display branch times in the branch timezone instead of the device timezone
  multi_timezone_enabled: false
  # IANA timezone identifier of the retailer, used when the branch has none
  retailer_timezone_id: null
  # IANA timezone identifier of the current branch
  branch_timezone_id: null
"""

    # Live Configuration Management Methods

    def set_current_config(self, config: BranchTimeConfig) -> None:
        """
        Set the current configuration.

        Args:
            config: Configuration object to set as current
        """
        with self._config_lock:
            old_config = self._current_config
            self._current_config = config

            if old_config is not None:
                self._notify(old_config, config)

    @property
    def config_file_path(self) -> Path | None:
        """
        Get the current config file path.

        Returns:
            Path to the current config file, or None if not set
        """
        return self._config_file_path

    @config_file_path.setter
    def config_file_path(self, path: Path | None) -> None:
        self._config_file_path = path

    @config_file_path.deleter
    def config_file_path(self) -> None:
        self._config_file_path = None

    def get_current_config(self) -> BranchTimeConfig:
        """
        Get the current configuration.

        Returns:
            BranchTimeConfig: The current configuration

        Raises:
            RuntimeError: If no configuration has been set
        """
        with self._config_lock:
            if self._current_config is None:
                raise RuntimeError(
                    "No configuration has been set. Call set_current_config() first."
                )
            return self._current_config

    def get_timezone_settings(self) -> TimezoneSettings:
        """Return the timezone section of the current configuration."""
        return self.get_current_config().timezone

    def update_runtime_config(self, new_config: BranchTimeConfig) -> None:
        """
        Update the runtime configuration and notify callbacks.

        Args:
            new_config: The new configuration to apply
        """
        with self._config_lock:
            old_config = self._current_config
            self._current_config = new_config

            if old_config is not None:
                self._notify(old_config, new_config)

    def switch_branch(self, branch_timezone_id: str | None) -> BranchTimeConfig:
        """
        Replace the current branch timezone identifier.

        Args:
            branch_timezone_id: IANA identifier of the branch now in use

        Returns:
            BranchTimeConfig: The configuration now in effect
        """
        with self._config_lock:
            current = self.get_current_config()
            timezone = TimezoneSettings.model_validate(
                {**current.timezone.model_dump(), "branch_timezone_id": branch_timezone_id}
            )
            new_config = current.model_copy(update={"timezone": timezone})
            self.update_runtime_config(new_config)
            logger.info(f"Switched branch timezone to {branch_timezone_id}")
            return new_config

    def register_change_callback(
        self, callback: Callable[[BranchTimeConfig, BranchTimeConfig], None]
    ) -> None:
        """
        Register a callback to be called when configuration changes.

        Args:
            callback: Function to call with (old_config, new_config) when config changes
        """
        with self._config_lock:
            if callback not in self._change_callbacks:
                self._change_callbacks.append(callback)

    def unregister_change_callback(
        self, callback: Callable[[BranchTimeConfig, BranchTimeConfig], None]
    ) -> None:
        """
        Unregister a configuration change callback.

        Args:
            callback: The callback function to remove
        """
        with self._config_lock:
            if callback in self._change_callbacks:
                self._change_callbacks.remove(callback)

    def _notify(self, old_config: BranchTimeConfig, new_config: BranchTimeConfig) -> None:
        for callback in self._change_callbacks:
            try:
                callback(old_config, new_config)
            except Exception as e:
                logger.error(f"Error in config change callback: {e}")
