"""Release Tool - Versioned, low-downtime releases of multi-application packages.

Packages are rendered into manifests, compared with what is deployed, and
rolled out with a red/black strategy. Every install, upgrade and rollback
is recorded as a new release version.
"""

from .__version__ import __version__, __version_info__, __author__, __email__, __license__

# Core API
from .core import ManifestRenderer, ReleaseAnalyzer, KindRegistry
from .services import ReleaseService, InMemoryPackageSource, FilesystemPackageSource, ConfigService
from .deployer import AppDeployer, InMemoryAppDeployer, DeployerRegistry
from .strategies import RedBlackUpgradeStrategy, HealthChecker, UpgradeState

# Data models
from .models import (
    Package,
    PackageReference,
    Template,
    ConfigValues,
    Manifest,
    AppSpec,
    Release,
    ReleaseInfo,
    StatusCode,
    AppStatus,
    DeploymentState,
    ReleaseToolConfig,
)

# Exceptions
from .api.exceptions import (
    ReleaseToolError,
    ValidationError,
    ConfigError,
    PackageNotFoundError,
    ReleaseNotFoundError,
    ReleaseAlreadyExistsError,
    InvalidVersionError,
    UpgradeInProgressError,
    DeploymentFailedError,
    HealthCheckTimeoutError,
    TemplateRenderError,
    CyclicPackageDependencyError,
    PlatformNotFoundError,
    ReleaseUpgradeError,
)

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__author__",
    "__email__",
    "__license__",

    # Main classes
    "ManifestRenderer",
    "ReleaseAnalyzer",
    "KindRegistry",
    "ReleaseService",
    "InMemoryPackageSource",
    "FilesystemPackageSource",
    "ConfigService",
    "AppDeployer",
    "InMemoryAppDeployer",
    "DeployerRegistry",
    "RedBlackUpgradeStrategy",
    "HealthChecker",
    "UpgradeState",

    # Data models
    "Package",
    "PackageReference",
    "Template",
    "ConfigValues",
    "Manifest",
    "AppSpec",
    "Release",
    "ReleaseInfo",
    "StatusCode",
    "AppStatus",
    "DeploymentState",
    "ReleaseToolConfig",

    # Exceptions
    "ReleaseToolError",
    "ValidationError",
    "ConfigError",
    "PackageNotFoundError",
    "ReleaseNotFoundError",
    "ReleaseAlreadyExistsError",
    "InvalidVersionError",
    "UpgradeInProgressError",
    "DeploymentFailedError",
    "HealthCheckTimeoutError",
    "TemplateRenderError",
    "CyclicPackageDependencyError",
    "PlatformNotFoundError",
    "ReleaseUpgradeError",
]
