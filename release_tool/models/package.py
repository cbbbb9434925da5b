# release_tool/models/package.py
"""Package models"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Tuple


@dataclass(frozen=True)
class Template:
    """Named template text inside a package"""
    name: str
    data: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary"""
        return {'name': self.name, 'data': self.data}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'Template':
        """Create from dictionary"""
        return cls(name=data['name'], data=data['data'])


@dataclass(frozen=True)
class ConfigValues:
    """Raw YAML configuration values"""
    raw: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.raw or not self.raw.strip()

    @classmethod
    def of(cls, raw: Optional[str]) -> 'ConfigValues':
        return cls(raw=raw or "")


@dataclass(frozen=True)
class PackageReference:
    """Reference to a package by name and version"""
    name: str
    version: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name}:{self.version or 'latest'}"

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Convert to dictionary"""
        return {'name': self.name, 'version': self.version}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackageReference':
        """Create from dictionary"""
        return cls(name=data['name'], version=data.get('version'))

    @classmethod
    def parse(cls, value: str) -> 'PackageReference':
        """Parse 'name' or 'name:version'"""
        name, _, version = value.partition(':')
        return cls(name=name.strip(), version=version.strip() or None)


@dataclass(frozen=True)
class Package:
    """Resolved package: metadata, templates, default values and dependencies

    Templates are kept in declaration order; rendering depends on it.
    """
    name: str
    version: str
    maintainer: Optional[str] = None
    description: Optional[str] = None
    templates: Tuple[Template, ...] = ()
    config_values: ConfigValues = field(default_factory=ConfigValues)
    dependencies: Tuple['Package', ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'templates', tuple(self.templates))
        object.__setattr__(self, 'dependencies', tuple(self.dependencies))

    @property
    def reference(self) -> PackageReference:
        return PackageReference(self.name, self.version)

    @property
    def dependency_names(self) -> List[str]:
        return [dependency.name for dependency in self.dependencies]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            'name': self.name,
            'version': self.version,
            'templates': [t.to_dict() for t in self.templates],
        }
        if self.maintainer:
            data['maintainer'] = self.maintainer
        if self.description:
            data['description'] = self.description
        if not self.config_values.is_empty:
            data['config_values'] = self.config_values.raw
        if self.dependencies:
            data['dependencies'] = [d.to_dict() for d in self.dependencies]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Package':
        """Create from dictionary"""
        return cls(
            name=data['name'],
            version=str(data['version']),
            maintainer=data.get('maintainer'),
            description=data.get('description'),
            templates=tuple(Template.from_dict(t) for t in data.get('templates', [])),
            config_values=ConfigValues.of(data.get('config_values')),
            dependencies=tuple(cls.from_dict(d) for d in data.get('dependencies', []))
        )
