"""
branchtime - Timezone-aware date utilities for multi-branch retail systems.
"""

__version__ = "1.0.0"
