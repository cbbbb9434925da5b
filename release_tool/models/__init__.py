# release_tool/models/__init__.py
"""Data models for release-tool"""

from .package import Package, PackageReference, Template, ConfigValues
from .manifest import Manifest, AppSpec, AppSpecKind
from .release import (
    Release,
    ReleaseInfo,
    Status,
    StatusCode,
    ReleaseOperation,
    AppDeployerData,
    AppStatus,
    DeploymentState,
)
from .difference import (
    PropertiesDiff,
    PropertyChange,
    ApplicationManifestDifference,
    ReleaseDifference,
    ReleaseAnalysisReport,
)
from .config import (
    ReleaseToolConfig,
    HealthCheckConfig,
    RepositoryConfig,
    PackageSourceConfig,
    PlatformConfig,
)

__all__ = [
    # Package models
    "Package",
    "PackageReference",
    "Template",
    "ConfigValues",

    # Manifest models
    "Manifest",
    "AppSpec",
    "AppSpecKind",

    # Release models
    "Release",
    "ReleaseInfo",
    "Status",
    "StatusCode",
    "ReleaseOperation",
    "AppDeployerData",
    "AppStatus",
    "DeploymentState",

    # Difference models
    "PropertiesDiff",
    "PropertyChange",
    "ApplicationManifestDifference",
    "ReleaseDifference",
    "ReleaseAnalysisReport",

    # Config models
    "ReleaseToolConfig",
    "HealthCheckConfig",
    "RepositoryConfig",
    "PackageSourceConfig",
    "PlatformConfig",
]
