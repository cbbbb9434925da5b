# release_tool/deployer/registry.py
"""Registry of deployers keyed by platform name"""

import importlib
import inspect
import logging
from typing import Dict, Iterable, List, Type

from .base import AppDeployer
from ..api.exceptions import ConfigError, PlatformNotFoundError
from ..models.config import PlatformConfig


class DeployerRegistry:
    """Maps platform names to deployer instances"""

    def __init__(self):
        self._deployers: Dict[str, AppDeployer] = {}
        self.logger = logging.getLogger("DeployerRegistry")

    def register(self, platform_name: str, deployer: AppDeployer) -> None:
        """
        Register a deployer for a platform

        Args:
            platform_name: Platform name
            deployer: Deployer instance
        """
        if platform_name in self._deployers:
            self.logger.warning(f"Deployer for platform {platform_name} already registered, replacing")
        self._deployers[platform_name] = deployer
        self.logger.info(f"Registered deployer for platform {platform_name}: "
                         f"{deployer.__class__.__name__}")

    def get(self, platform_name: str) -> AppDeployer:
        """
        Get deployer for a platform

        Raises:
            PlatformNotFoundError: If no deployer is registered
        """
        deployer = self._deployers.get(platform_name)
        if deployer is None:
            raise PlatformNotFoundError(platform_name, self._deployers.keys())
        return deployer

    def platforms(self) -> List[str]:
        """Registered platform names"""
        return sorted(self._deployers)

    def __contains__(self, platform_name: str) -> bool:
        return platform_name in self._deployers

    @classmethod
    def from_config(cls, platforms: Iterable[PlatformConfig]) -> 'DeployerRegistry':
        """
        Build a registry from platform configurations

        Args:
            platforms: Platform configurations

        Returns:
            DeployerRegistry

        Raises:
            ConfigError: If a deployer class cannot be loaded
        """
        registry = cls()
        for platform in platforms:
            deployer_class = load_deployer_class(platform.deployer)
            try:
                deployer = deployer_class(platform.options)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid options for platform {platform.name}: {e}")
            registry.register(platform.name, deployer)
        return registry

    async def initialize(self) -> None:
        """Initialize all deployers"""
        for deployer in self._deployers.values():
            await deployer.initialize()

    async def close(self) -> None:
        """Close all deployers"""
        for name, deployer in self._deployers.items():
            try:
                await deployer.close()
            except Exception as e:
                self.logger.error(f"Failed to close deployer for platform {name}: {e}")


def load_deployer_class(reference: str) -> Type[AppDeployer]:
    """
    Import a deployer class from a 'module:Class' reference

    Args:
        reference: Reference such as release_tool.deployer.memory:InMemoryAppDeployer

    Returns:
        Deployer class

    Raises:
        ConfigError: If the reference is malformed, missing or not a deployer
    """
    module_name, _, class_name = reference.partition(':')
    if not module_name or not class_name:
        raise ConfigError(f"Deployer must be given as 'module:Class', got: {reference}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Failed to import deployer module {module_name}: {e}")

    deployer_class = getattr(module, class_name, None)
    if not (inspect.isclass(deployer_class)
            and issubclass(deployer_class, AppDeployer)
            and not inspect.isabstract(deployer_class)):
        raise ConfigError(f"{reference} is not a concrete AppDeployer class")

    return deployer_class
