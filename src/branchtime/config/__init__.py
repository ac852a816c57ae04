"""Configuration models and manager for branchtime."""

from .manager import ConfigManager
from .schema import BranchTimeConfig, TimezoneSettings

__all__ = [
    "ConfigManager",
    "BranchTimeConfig",
    "TimezoneSettings",
]
