"""
Test helper utilities for branchtime tests.

This module provides reusable utility functions and context managers for
common testing patterns: configuration managers, temporary YAML files and
directories, and settings construction.
"""

from __future__ import annotations

import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

import yaml

from branchtime.config.manager import ConfigManager
from branchtime.config.schema import BranchTimeConfig, TimezoneSettings

__all__ = [
    "create_config_manager_with_config",
    "create_timezone_settings",
    "create_temp_config_file",
    "create_temp_directory",
]


def create_config_manager_with_config(config: BranchTimeConfig) -> ConfigManager:
    """
    Create a ConfigManager instance with a pre-configured BranchTimeConfig.

    Args:
        config: The BranchTimeConfig instance to set as the current configuration

    Returns:
        ConfigManager: A configured ConfigManager instance
    """
    manager = ConfigManager()
    manager.set_current_config(config)
    return manager


def create_timezone_settings(
    *,
    multi_timezone_enabled: bool = True,
    branch_timezone_id: str | None = None,
    retailer_timezone_id: str | None = None,
) -> TimezoneSettings:
    """
    Create TimezoneSettings with multi-timezone mode on by default.

    Example:
        >>> settings = create_timezone_settings(branch_timezone_id="Asia/Tokyo")
        >>> settings.multi_timezone_enabled
        True
    """
    return TimezoneSettings(
        multi_timezone_enabled=multi_timezone_enabled,
        branch_timezone_id=branch_timezone_id,
        retailer_timezone_id=retailer_timezone_id,
    )


@contextmanager
def create_temp_config_file(
    config_data: dict[str, object] | None = None,
    *,
    suffix: str = ".yml",
    encoding: str = "utf-8",
) -> Generator[Path, None, None]:
    """
    Create a temporary configuration file with YAML content.

    Args:
        config_data: Dictionary of configuration data to write to file.
                    If None, writes a minimal multi-timezone configuration.
        suffix: File suffix for the temporary file (default: ".yml")
        encoding: File encoding (default: "utf-8")

    Yields:
        Path: Path to the created temporary configuration file

    Raises:
        OSError: If file creation or writing fails
        yaml.YAMLError: If YAML serialization fails
    """
    if config_data is None:
        config_data = {
            "timezone": {
                "multi_timezone_enabled": True,
                "branch_timezone_id": "Asia/Ho_Chi_Minh",
            },
        }

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            suffix=suffix,
            encoding=encoding,
            delete=False,
        ) as temp_file:
            try:
                yaml.dump(config_data, temp_file, default_flow_style=False)
                temp_path = Path(temp_file.name)
            except yaml.YAMLError as e:
                msg = f"Failed to serialize configuration data to YAML: {e}"
                raise yaml.YAMLError(msg) from e

        try:
            yield temp_path
        finally:
            temp_path.unlink(missing_ok=True)

    except OSError as e:
        msg = f"Failed to create temporary configuration file: {e}"
        raise OSError(msg) from e


@contextmanager
def create_temp_directory(
    *,
    prefix: str | None = None,
    suffix: str | None = None,
) -> Generator[Path, None, None]:
    """
    Create a temporary directory with automatic cleanup.

    Args:
        prefix: Optional prefix for the directory name
        suffix: Optional suffix for the directory name

    Yields:
        Path: Path to the created temporary directory
    """
    with tempfile.TemporaryDirectory(prefix=prefix, suffix=suffix) as temp_dir_str:
        yield Path(temp_dir_str)
