# release_tool/repository/__init__.py
"""Release and deployer data repositories"""

from .base import ReleaseRepository, AppDeployerDataRepository
from .memory import InMemoryReleaseRepository, InMemoryAppDeployerDataRepository
from .filesystem import FilesystemReleaseRepository, FilesystemAppDeployerDataRepository
from .factory import RepositoryFactory, create_repositories

__all__ = [
    'ReleaseRepository',
    'AppDeployerDataRepository',
    'InMemoryReleaseRepository',
    'InMemoryAppDeployerDataRepository',
    'FilesystemReleaseRepository',
    'FilesystemAppDeployerDataRepository',
    'RepositoryFactory',
    'create_repositories',
]
