"""CLI utility modules"""

from .output import (
    console,
    format_status,
    format_release_result,
    format_release_info,
    release_table,
    format_manifest,
)
from .values import build_config_values

__all__ = [
    'console',
    'format_status',
    'format_release_result',
    'format_release_info',
    'release_table',
    'format_manifest',
    'build_config_values',
]
