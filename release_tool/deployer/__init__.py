# release_tool/deployer/__init__.py
"""Platform deployers"""

from .base import AppDeployer
from .memory import InMemoryAppDeployer
from .registry import DeployerRegistry, load_deployer_class

__all__ = [
    'AppDeployer',
    'InMemoryAppDeployer',
    'DeployerRegistry',
    'load_deployer_class',
]
