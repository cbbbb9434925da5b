# release_tool/models/manifest.py
"""Manifest models"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any, Tuple

from ..constants import MANIFEST_API_VERSION


class AppSpecKind(Enum):
    """Kinds of application documents a manifest may contain"""
    GENERIC_APP = "generic-app"
    CONTAINER_APP = "container-app"


@dataclass(frozen=True)
class AppSpec:
    """Deployable definition of one named application"""
    application_name: str
    kind: str
    resource: str
    version: str
    api_version: str = MANIFEST_API_VERSION
    application_properties: Dict[str, str] = field(default_factory=dict)
    deployment_properties: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Own copies, so callers cannot mutate a rendered manifest through shared dicts
        object.__setattr__(self, 'application_properties', dict(self.application_properties))
        object.__setattr__(self, 'deployment_properties', dict(self.deployment_properties))

    @property
    def resource_location(self) -> str:
        """Resource locator with version, e.g. docker:acme/logger:1.0.0"""
        if not self.version:
            return self.resource
        return f"{self.resource}:{self.version}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'application_name': self.application_name,
            'kind': self.kind,
            'api_version': self.api_version,
            'resource': self.resource,
            'version': self.version,
            'application_properties': dict(self.application_properties),
            'deployment_properties': dict(self.deployment_properties),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppSpec':
        """Create from dictionary"""
        return cls(
            application_name=data['application_name'],
            kind=data['kind'],
            api_version=data.get('api_version', MANIFEST_API_VERSION),
            resource=data['resource'],
            version=data.get('version', ''),
            application_properties=data.get('application_properties', {}),
            deployment_properties=data.get('deployment_properties', {})
        )


@dataclass(frozen=True)
class Manifest:
    """Rendered manifest: the YAML text and the application specs parsed from it"""
    data: str
    app_specs: Tuple[AppSpec, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'app_specs', tuple(self.app_specs))

    @property
    def application_names(self) -> List[str]:
        """Application names in manifest order"""
        return [spec.application_name for spec in self.app_specs]

    def find(self, application_name: str) -> Optional[AppSpec]:
        """Find app spec by application name"""
        for spec in self.app_specs:
            if spec.application_name == application_name:
                return spec
        return None

    def as_map(self) -> Dict[str, AppSpec]:
        return {spec.application_name: spec for spec in self.app_specs}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'data': self.data,
            'app_specs': [spec.to_dict() for spec in self.app_specs]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Manifest':
        """Create from dictionary"""
        return cls(
            data=data.get('data', ''),
            app_specs=tuple(AppSpec.from_dict(s) for s in data.get('app_specs', []))
        )
