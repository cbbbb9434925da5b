# release_tool/services/__init__.py
"""Service layer for release-tool"""

from .config_service import ConfigService
from .package_service import (
    PackageSource,
    InMemoryPackageSource,
    FilesystemPackageSource,
    create_package_source,
)
from .release_manager import ReleaseManager
from .release_service import ReleaseService, ReleaseLocks

__all__ = [
    'ConfigService',
    'PackageSource',
    'InMemoryPackageSource',
    'FilesystemPackageSource',
    'create_package_source',
    'ReleaseManager',
    'ReleaseService',
    'ReleaseLocks',
]
