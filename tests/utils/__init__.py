"""
Test utilities package for branchtime tests.

## Available Modules

### test_helpers.py
Core test utilities for configuration and file management:
- `create_config_manager_with_config()`: Create ConfigManager with pre-set configuration
- `create_timezone_settings()`: Build TimezoneSettings with multi-timezone mode on
- `create_temp_config_file()`: Context manager for temporary YAML config files
- `create_temp_directory()`: Context manager for temporary directories
"""

from .test_helpers import (
    create_config_manager_with_config,
    create_temp_config_file,
    create_temp_directory,
    create_timezone_settings,
)

__all__ = [
    "create_config_manager_with_config",
    "create_temp_config_file",
    "create_temp_directory",
    "create_timezone_settings",
]
