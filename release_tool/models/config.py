"""Configuration data models"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from ..constants import (
    DEFAULT_DEPLOYER,
    DEFAULT_HEALTH_CHECK_INTERVAL,
    DEFAULT_HEALTH_CHECK_TIMEOUT,
    DEFAULT_PACKAGE_SOURCE_TYPE,
    DEFAULT_PLATFORM_NAME,
    DEFAULT_REPOSITORY_TYPE,
    DEFAULT_STATE_DIR,
    PLATFORM_NAME_PATTERN,
    SUPPORTED_PACKAGE_SOURCE_TYPES,
    SUPPORTED_REPOSITORY_TYPES,
)


@dataclass
class HealthCheckConfig:
    """Health check polling configuration"""

    interval_seconds: float = DEFAULT_HEALTH_CHECK_INTERVAL
    timeout_seconds: float = DEFAULT_HEALTH_CHECK_TIMEOUT

    def __post_init__(self):
        if self.interval_seconds <= 0:
            raise ValueError("Health check interval must be positive")
        if self.timeout_seconds <= 0:
            raise ValueError("Health check timeout must be positive")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "interval_seconds": self.interval_seconds,
            "timeout_seconds": self.timeout_seconds
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HealthCheckConfig':
        """Create from dictionary"""
        return cls(
            interval_seconds=float(data.get("interval_seconds", DEFAULT_HEALTH_CHECK_INTERVAL)),
            timeout_seconds=float(data.get("timeout_seconds", DEFAULT_HEALTH_CHECK_TIMEOUT))
        )


@dataclass
class RepositoryConfig:
    """Where release records are kept"""

    type: str = DEFAULT_REPOSITORY_TYPE  # memory, filesystem
    path: Optional[str] = None

    def __post_init__(self):
        if self.type not in SUPPORTED_REPOSITORY_TYPES:
            raise ValueError(f"Unsupported repository type: {self.type}")
        if self.type == "filesystem" and not self.path:
            self.path = DEFAULT_STATE_DIR

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {"type": self.type}
        if self.path:
            data["path"] = self.path
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RepositoryConfig':
        """Create from dictionary"""
        return cls(type=data.get("type", DEFAULT_REPOSITORY_TYPE), path=data.get("path"))


@dataclass
class PackageSourceConfig:
    """Where packages are resolved from"""

    type: str = DEFAULT_PACKAGE_SOURCE_TYPE  # memory, filesystem
    path: Optional[str] = None

    def __post_init__(self):
        if self.type not in SUPPORTED_PACKAGE_SOURCE_TYPES:
            raise ValueError(f"Unsupported package source type: {self.type}")
        if self.type == "filesystem" and not self.path:
            raise ValueError("Filesystem package source requires 'path'")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {"type": self.type}
        if self.path:
            data["path"] = self.path
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackageSourceConfig':
        """Create from dictionary"""
        return cls(type=data.get("type", DEFAULT_PACKAGE_SOURCE_TYPE), path=data.get("path"))


@dataclass
class PlatformConfig:
    """Deployer configuration for one platform"""

    name: str
    deployer: str = DEFAULT_DEPLOYER  # module:Class
    description: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not PLATFORM_NAME_PATTERN.match(self.name):
            raise ValueError(f"Invalid platform name: {self.name}")
        if ':' not in self.deployer:
            raise ValueError(f"Deployer must be given as 'module:Class', got: {self.deployer}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {"deployer": self.deployer}
        if self.description:
            data["description"] = self.description
        if self.options:
            data["options"] = self.options
        return data

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> 'PlatformConfig':
        """Create from dictionary"""
        return cls(
            name=name,
            deployer=data.get("deployer", DEFAULT_DEPLOYER),
            description=data.get("description"),
            options=data.get("options", {})
        )


@dataclass
class ReleaseToolConfig:
    """Top-level configuration"""

    health_check: HealthCheckConfig = field(default_factory=HealthCheckConfig)
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    packages: PackageSourceConfig = field(default_factory=PackageSourceConfig)
    platforms: List[PlatformConfig] = field(default_factory=list)
    log_level: Optional[str] = None

    def __post_init__(self):
        if not self.platforms:
            self.platforms = [PlatformConfig(name=DEFAULT_PLATFORM_NAME)]

    def get_platform(self, name: str) -> Optional[PlatformConfig]:
        """Get platform by name"""
        for platform in self.platforms:
            if platform.name == name:
                return platform
        return None

    @property
    def platform_names(self) -> List[str]:
        return [p.name for p in self.platforms]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "health_check": self.health_check.to_dict(),
            "repository": self.repository.to_dict(),
            "packages": self.packages.to_dict(),
            "platforms": {p.name: p.to_dict() for p in self.platforms}
        }
        if self.log_level:
            data["log_level"] = self.log_level
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ReleaseToolConfig':
        """Create from dictionary"""
        data = data or {}
        platforms = [
            PlatformConfig.from_dict(name, platform_data or {})
            for name, platform_data in (data.get("platforms") or {}).items()
        ]
        return cls(
            health_check=HealthCheckConfig.from_dict(data.get("health_check") or {}),
            repository=RepositoryConfig.from_dict(data.get("repository") or {}),
            packages=PackageSourceConfig.from_dict(data.get("packages") or {}),
            platforms=platforms,
            log_level=data.get("log_level")
        )
