# release_tool/models/release.py
"""Release models for the release tool"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional

from .manifest import Manifest
from .package import ConfigValues, PackageReference


class StatusCode(Enum):
    """Release status codes"""
    UNKNOWN = "unknown"
    DEPLOYING = "deploying"
    DEPLOYED = "deployed"
    DELETING = "deleting"
    DELETED = "deleted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (StatusCode.DEPLOYED, StatusCode.DELETED, StatusCode.FAILED)


class ReleaseOperation(Enum):
    """Operations that take the per-release lock"""
    INSTALL = "install"
    UPGRADE = "upgrade"
    ROLLBACK = "rollback"
    DELETE = "delete"


class DeploymentState(Enum):
    """Live state of a deployed application as reported by a deployer"""
    DEPLOYED = "deployed"
    DEPLOYING = "deploying"
    UNDEPLOYED = "undeployed"
    PARTIAL = "partial"
    FAILED = "failed"
    ERROR = "error"
    UNKNOWN = "unknown"


@dataclass
class AppStatus:
    """Deployer-reported status of one deployment"""
    deployment_id: str
    state: DeploymentState = DeploymentState.UNKNOWN
    attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def is_healthy(self) -> bool:
        return self.state == DeploymentState.DEPLOYED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'deployment_id': self.deployment_id,
            'state': self.state.value,
            'attributes': dict(self.attributes)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppStatus':
        """Create from dictionary"""
        return cls(
            deployment_id=data['deployment_id'],
            state=DeploymentState(data.get('state', 'unknown')),
            attributes=data.get('attributes', {})
        )


@dataclass
class Status:
    """Release status"""
    status_code: StatusCode = StatusCode.UNKNOWN
    platform_status: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'status_code': self.status_code.value,
            'platform_status': self.platform_status,
            'description': self.description
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Status':
        """Create from dictionary"""
        return cls(
            status_code=StatusCode(data.get('status_code', 'unknown')),
            platform_status=data.get('platform_status', ''),
            description=data.get('description', '')
        )


@dataclass
class Release:
    """Named, versioned deployment record with an immutable manifest"""
    name: str
    version: int
    package: PackageReference
    manifest: Manifest
    platform_name: str
    config_values: ConfigValues = field(default_factory=ConfigValues)
    status: Status = field(default_factory=Status)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        if not self.created_at:
            self.created_at = datetime.now().isoformat()
        if not self.updated_at:
            self.updated_at = self.created_at

    @property
    def status_code(self) -> StatusCode:
        return self.status.status_code

    @property
    def is_deleted(self) -> bool:
        return self.status.status_code == StatusCode.DELETED

    def set_status(self, status_code: StatusCode, description: Optional[str] = None) -> None:
        """Replace the status code, keeping the platform status text"""
        self.status = Status(
            status_code=status_code,
            platform_status=self.status.platform_status,
            description=self.status.description if description is None else description
        )
        self.updated_at = datetime.now().isoformat()

    def __str__(self) -> str:
        return f"{self.name}-v{self.version}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            'name': self.name,
            'version': self.version,
            'package': self.package.to_dict(),
            'config_values': self.config_values.raw,
            'manifest': self.manifest.to_dict(),
            'platform_name': self.platform_name,
            'status': self.status.to_dict(),
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Release':
        """Create from dictionary"""
        return cls(
            name=data['name'],
            version=int(data['version']),
            package=PackageReference.from_dict(data['package']),
            config_values=ConfigValues.of(data.get('config_values')),
            manifest=Manifest.from_dict(data['manifest']),
            platform_name=data['platform_name'],
            status=Status.from_dict(data.get('status', {})),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at')
        )


@dataclass
class AppDeployerData:
    """Which deployer-assigned deployment backs each application of a release version"""
    release_name: str
    release_version: int
    deployment_data: Dict[str, str] = field(default_factory=dict)  # application -> deployment id

    @property
    def deployment_ids(self) -> List[str]:
        return list(self.deployment_data.values())

    def find_application_name(self, deployment_id: str) -> Optional[str]:
        for application_name, candidate in self.deployment_data.items():
            if candidate == deployment_id:
                return application_name
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'release_name': self.release_name,
            'release_version': self.release_version,
            'deployment_data': dict(self.deployment_data)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppDeployerData':
        """Create from dictionary"""
        return cls(
            release_name=data['release_name'],
            release_version=int(data['release_version']),
            deployment_data=data.get('deployment_data', {})
        )


@dataclass
class ReleaseInfo:
    """Point-in-time view of a release and its live applications"""
    name: str
    version: int
    platform_name: str
    status: Status
    app_statuses: Dict[str, AppStatus] = field(default_factory=dict)  # application -> status
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def status_code(self) -> StatusCode:
        return self.status.status_code

    @property
    def description(self) -> str:
        return self.status.description

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'name': self.name,
            'version': self.version,
            'platform_name': self.platform_name,
            'status': self.status.to_dict(),
            'app_statuses': {name: s.to_dict() for name, s in self.app_statuses.items()},
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }
