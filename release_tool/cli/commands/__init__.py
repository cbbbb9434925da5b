# release_tool/cli/commands/__init__.py
"""CLI commands"""

from . import release
from . import config

__all__ = [
    "release",
    "config",
]
