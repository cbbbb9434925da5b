"""Repository factory"""

from typing import Dict, Tuple, Type

from .base import ReleaseRepository, AppDeployerDataRepository
from .filesystem import FilesystemReleaseRepository, FilesystemAppDeployerDataRepository
from .memory import InMemoryReleaseRepository, InMemoryAppDeployerDataRepository
from ..api.exceptions import ConfigError
from ..models.config import RepositoryConfig


class RepositoryFactory:
    """Factory for creating repository pairs"""

    # Registry of repository backends
    _backends: Dict[str, Tuple[Type[ReleaseRepository], Type[AppDeployerDataRepository]]] = {
        "memory": (InMemoryReleaseRepository, InMemoryAppDeployerDataRepository),
        "filesystem": (FilesystemReleaseRepository, FilesystemAppDeployerDataRepository),
    }

    @classmethod
    def create_from_config(cls,
                           config: RepositoryConfig) -> Tuple[ReleaseRepository, AppDeployerDataRepository]:
        """Create release and deployer data repositories

        Args:
            config: Repository configuration

        Returns:
            Tuple of (release repository, app deployer data repository)

        Raises:
            ConfigError: If repository type is not supported
        """
        if config.type not in cls._backends:
            raise ConfigError(f"Unsupported repository type: {config.type}")

        release_class, data_class = cls._backends[config.type]
        if config.type == "memory":
            return release_class(), data_class()
        return release_class(config.path), data_class(config.path)

    @classmethod
    def get_supported_types(cls) -> list:
        return list(cls._backends)


def create_repositories(config: RepositoryConfig) -> Tuple[ReleaseRepository, AppDeployerDataRepository]:
    """Shortcut for RepositoryFactory.create_from_config"""
    return RepositoryFactory.create_from_config(config)
