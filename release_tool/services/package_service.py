# release_tool/services/package_service.py
"""Package sources: resolve package references to packages"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Union

import aiofiles
import yaml

from ..api.exceptions import ConfigError, PackageNotFoundError, ValidationError
from ..constants import (
    PACKAGE_DEPENDENCIES_DIR,
    PACKAGE_METADATA_FILE,
    PACKAGE_TEMPLATES_DIR,
    PACKAGE_VALUES_FILE,
    TEMPLATE_FILE_PATTERNS,
)
from ..models.config import PackageSourceConfig
from ..models.package import ConfigValues, Package, Template
from ..utils.template_utils import load_text_yaml
from ..utils.version_utils import get_latest_version


class PackageSource(ABC):
    """Resolves (name, version) to a Package"""

    @abstractmethod
    async def versions(self, name: str) -> List[str]:
        """Available versions of a package"""
        pass

    @abstractmethod
    async def _load(self, name: str, version: str) -> Optional[Package]:
        """Load an exact version, None if absent"""
        pass

    async def resolve(self, name: str, version: Optional[str] = None) -> Package:
        """
        Resolve a package

        Args:
            name: Package name
            version: Exact version, or None for the latest

        Returns:
            Package with its dependencies

        Raises:
            PackageNotFoundError: If the package or version does not exist
        """
        if version is None:
            version = get_latest_version(await self.versions(name))
            if version is None:
                raise PackageNotFoundError(name)

        package = await self._load(name, version)
        if package is None:
            raise PackageNotFoundError(name, version)
        return package


class InMemoryPackageSource(PackageSource):
    """Packages registered in process"""

    def __init__(self, packages: Optional[List[Package]] = None):
        self._packages: Dict[str, Dict[str, Package]] = {}
        for package in packages or []:
            self.add(package)

    def add(self, package: Package) -> None:
        self._packages.setdefault(package.name, {})[package.version] = package

    async def versions(self, name: str) -> List[str]:
        return list(self._packages.get(name, {}))

    async def _load(self, name: str, version: str) -> Optional[Package]:
        return self._packages.get(name, {}).get(version)


class FilesystemPackageSource(PackageSource):
    """Packages laid out on disk

    <root>/<name>/<version>/package.yml
                           /values.yml
                           /templates/*.yml
                           /packages/<dependency>/...   (same layout)
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.logger = logging.getLogger("FilesystemPackageSource")

    async def versions(self, name: str) -> List[str]:
        package_dir = self.root / name
        if not package_dir.is_dir():
            return []
        return [d.name for d in package_dir.iterdir() if (d / PACKAGE_METADATA_FILE).is_file()]

    async def _load(self, name: str, version: str) -> Optional[Package]:
        package_dir = self.root / name / version
        if not (package_dir / PACKAGE_METADATA_FILE).is_file():
            return None
        return await self.load_package_dir(package_dir)

    async def load_package_dir(self, package_dir: Path) -> Package:
        """
        Load a package directory and its nested dependencies

        Raises:
            ValidationError: If package.yml is missing required fields
        """
        metadata_file = package_dir / PACKAGE_METADATA_FILE
        try:
            metadata = load_text_yaml(await _read_text(metadata_file)) or {}
        except yaml.YAMLError as e:
            raise ValidationError(f"{metadata_file} is not valid YAML: {e}")
        if not isinstance(metadata, dict) or not metadata.get('name') or not metadata.get('version'):
            raise ValidationError(f"{metadata_file} must define name and version")

        values_file = package_dir / PACKAGE_VALUES_FILE
        values = await _read_text(values_file) if values_file.is_file() else ""

        templates = []
        templates_dir = package_dir / PACKAGE_TEMPLATES_DIR
        if templates_dir.is_dir():
            files = sorted({f for pattern in TEMPLATE_FILE_PATTERNS for f in templates_dir.glob(pattern)})
            for template_file in files:
                templates.append(Template(name=template_file.name, data=await _read_text(template_file)))

        dependencies = []
        dependencies_dir = package_dir / PACKAGE_DEPENDENCIES_DIR
        if dependencies_dir.is_dir():
            for dependency_dir in sorted(d for d in dependencies_dir.iterdir() if d.is_dir()):
                dependencies.append(await self.load_package_dir(dependency_dir))

        package = Package(
            name=str(metadata['name']),
            version=str(metadata['version']),
            maintainer=metadata.get('maintainer'),
            description=metadata.get('description'),
            templates=tuple(templates),
            config_values=ConfigValues.of(values),
            dependencies=tuple(dependencies)
        )
        self.logger.debug(f"Loaded package {package.reference} from {package_dir}")
        return package


async def _read_text(path: Path) -> str:
    async with aiofiles.open(path, 'r', encoding='utf-8') as f:
        return await f.read()


def create_package_source(config: PackageSourceConfig) -> PackageSource:
    """Create the package source described by configuration"""
    if config.type == "memory":
        return InMemoryPackageSource()
    if config.type == "filesystem":
        return FilesystemPackageSource(config.path)
    raise ConfigError(f"Unsupported package source type: {config.type}")
