"""Exception definitions for release-tool API"""

from typing import Iterable, List, Optional

from ..constants import ErrorCode


class ReleaseToolError(Exception):
    """Base exception for release-tool"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ValidationError(ReleaseToolError):
    """Validation error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.VALIDATION_FAILED)


class ConfigError(ReleaseToolError):
    """Configuration error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIG_FORMAT_ERROR)


class PackageNotFoundError(ReleaseToolError):
    """Package could not be resolved by the package source"""

    def __init__(self, package_name: str, version: Optional[str] = None):
        message = f"Package not found: {package_name}:{version or 'latest'}"
        super().__init__(message, ErrorCode.PACKAGE_NOT_FOUND)
        self.package_name = package_name
        self.version = version


class ReleaseNotFoundError(ReleaseToolError):
    """Release (or a specific version of it) not found"""

    def __init__(self, release_name: str, version: Optional[int] = None):
        if version is None:
            message = f"Release not found: {release_name}"
        else:
            message = f"Release not found: {release_name} v{version}"
        super().__init__(message, ErrorCode.RELEASE_NOT_FOUND)
        self.release_name = release_name
        self.version = version


class ReleaseAlreadyExistsError(ReleaseToolError):
    """A non-deleted release with the same name exists"""

    def __init__(self, release_name: str, version: int):
        message = (f"Release with the name [{release_name}] already exists "
                   f"(v{version}) and it is not deleted")
        super().__init__(message, ErrorCode.RELEASE_ALREADY_EXISTS)
        self.release_name = release_name
        self.version = version


class InvalidVersionError(ReleaseToolError):
    """Release version is not a positive integer"""

    def __init__(self, version):
        message = f"Invalid release version: {version}. Versions start at 1"
        super().__init__(message, ErrorCode.INVALID_VERSION)
        self.version = version


class UpgradeInProgressError(ReleaseToolError):
    """Another state-machine operation holds the release"""

    def __init__(self, release_name: str, operation: Optional[str] = None):
        message = f"Release [{release_name}] has an operation in progress"
        if operation:
            message += f" ({operation})"
        super().__init__(message, ErrorCode.UPGRADE_IN_PROGRESS)
        self.release_name = release_name
        self.operation = operation


class DeploymentFailedError(ReleaseToolError):
    """A deployer failed to deploy an application"""

    def __init__(self,
                 application_name: str,
                 cause: BaseException,
                 succeeded: Iterable[str] = ()):
        self.application_name = application_name
        self.cause = cause
        self.succeeded: List[str] = list(succeeded)
        message = (f"Deploy failed for application [{application_name}]: {cause}. "
                   f"Succeeded: [{', '.join(self.succeeded)}], "
                   f"failed: [{application_name}]")
        super().__init__(message, ErrorCode.DEPLOYMENT_FAILED)


class HealthCheckTimeoutError(ReleaseToolError):
    """New applications did not become healthy in time"""

    def __init__(self, timeout: float, unhealthy: Iterable[str] = ()):
        self.timeout = timeout
        self.unhealthy: List[str] = list(unhealthy)
        message = (f"Did not detect apps in replacing release as healthy after {timeout:g} s. "
                   f"Unhealthy: [{', '.join(self.unhealthy)}]")
        super().__init__(message, ErrorCode.HEALTH_CHECK_TIMEOUT)


class TemplateRenderError(ReleaseToolError):
    """Manifest could not be rendered from the package"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.TEMPLATE_RENDER_ERROR)


class CyclicPackageDependencyError(TemplateRenderError):
    """Package dependency graph contains a cycle"""

    def __init__(self, cycle: List[str]):
        self.cycle = list(cycle)
        ReleaseToolError.__init__(
            self,
            f"Cyclic package dependency: {' -> '.join(self.cycle)}",
            ErrorCode.CYCLIC_PACKAGE_DEPENDENCY
        )


class PlatformNotFoundError(ReleaseToolError):
    """No deployer registered for platform"""

    def __init__(self, platform_name: str, available: Iterable[str] = ()):
        available = sorted(available)
        message = f"No deployer registered for platform: {platform_name}"
        if available:
            message += f" (available: {', '.join(available)})"
        super().__init__(message, ErrorCode.PLATFORM_NOT_FOUND)
        self.platform_name = platform_name


class ReleaseUpgradeError(ReleaseToolError):
    """Upgrade request cannot proceed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.RELEASE_UPGRADE_ERROR)


class RepositoryError(ReleaseToolError):
    """Release repository rejected an operation"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.REPOSITORY_ERROR)


class InvalidStateTransitionError(ReleaseToolError):
    """Upgrade state machine was asked for an illegal transition"""

    def __init__(self, release_name: str, source, target):
        message = f"Illegal transition for release [{release_name}]: {source.value} -> {target.value}"
        super().__init__(message, ErrorCode.INVALID_STATE_TRANSITION)
        self.source = source
        self.target = target
