# release_tool/strategies/__init__.py
"""Upgrade strategies"""

from .health_check import HealthChecker
from .red_black import (
    RedBlackUpgradeStrategy,
    UpgradeContext,
    UpgradeState,
    ALLOWED_TRANSITIONS,
)

__all__ = [
    'HealthChecker',
    'RedBlackUpgradeStrategy',
    'UpgradeContext',
    'UpgradeState',
    'ALLOWED_TRANSITIONS',
]
