# release_tool/api/__init__.py
"""API layer for release-tool"""

from .exceptions import (
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
    RepositoryError,
    InvalidStateTransitionError,
)

__all__ = [
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
    "RepositoryError",
    "InvalidStateTransitionError",
]
