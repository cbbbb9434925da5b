# release_tool/repository/filesystem.py
"""Filesystem repositories: one JSON file per record"""

import json
import os
import re
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

import aiofiles

from .base import ReleaseRepository, AppDeployerDataRepository
from ..api.exceptions import RepositoryError
from ..constants import RELEASES_DIR, APP_DEPLOYER_DATA_DIR, RELEASE_FILE_PATTERN
from ..models.release import Release, AppDeployerData

_VERSION_FILE = re.compile(r"^v(\d+)\.json$")


class JsonRecordStore:
    """Reads and writes JSON records laid out as <base>/<name>/v<version>.json"""

    def __init__(self, base_path: Union[str, Path]):
        self.base_path = Path(base_path)

    def path_for(self, name: str, version: int) -> Path:
        return self.base_path / RELEASE_FILE_PATTERN.format(name=name, version=version)

    async def read(self, name: str, version: int) -> Optional[Dict[str, Any]]:
        path = self.path_for(name, version)
        if not path.exists():
            return None
        try:
            async with aiofiles.open(path, 'r', encoding='utf-8') as f:
                return json.loads(await f.read())
        except json.JSONDecodeError as e:
            raise RepositoryError(f"Corrupt record {path}: {e}")

    async def write(self, name: str, version: int, data: Dict[str, Any]) -> None:
        """Write to a temp file, then rename it over the record"""
        path = self.path_for(name, version)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f".{path.name}.tmp")

        async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
            await f.write(json.dumps(data, indent=2, ensure_ascii=False))

        os.replace(tmp_path, path)

    def versions(self, name: str) -> List[int]:
        directory = self.base_path / name
        if not directory.is_dir():
            return []
        versions = []
        for entry in directory.iterdir():
            match = _VERSION_FILE.match(entry.name)
            if match:
                versions.append(int(match.group(1)))
        return versions

    def names(self) -> List[str]:
        if not self.base_path.is_dir():
            return []
        return [entry.name for entry in self.base_path.iterdir()
                if entry.is_dir() and self.versions(entry.name)]

    def delete_all(self, name: str) -> None:
        directory = self.base_path / name
        if not directory.is_dir():
            return
        for entry in directory.iterdir():
            entry.unlink()
        directory.rmdir()


class FilesystemReleaseRepository(ReleaseRepository):
    """Releases stored under <root>/releases"""

    def __init__(self, root: Union[str, Path]):
        self.store = JsonRecordStore(Path(root) / RELEASES_DIR)

    async def _get(self, name: str, version: int) -> Optional[Release]:
        data = await self.store.read(name, version)
        return Release.from_dict(data) if data is not None else None

    async def _put(self, release: Release) -> None:
        await self.store.write(release.name, release.version, release.to_dict())

    async def _versions(self, name: str) -> List[int]:
        return self.store.versions(name)

    async def names(self) -> List[str]:
        return self.store.names()

    async def delete_all(self, name: str) -> None:
        self.store.delete_all(name)


class FilesystemAppDeployerDataRepository(AppDeployerDataRepository):
    """Deployment id mappings stored under <root>/app-deployer-data"""

    def __init__(self, root: Union[str, Path]):
        self.store = JsonRecordStore(Path(root) / APP_DEPLOYER_DATA_DIR)

    async def save(self, data: AppDeployerData) -> AppDeployerData:
        await self.store.write(data.release_name, data.release_version, data.to_dict())
        return data

    async def find_by_release_name_and_version(self,
                                               release_name: str,
                                               release_version: int) -> Optional[AppDeployerData]:
        data = await self.store.read(release_name, release_version)
        return AppDeployerData.from_dict(data) if data is not None else None

    async def find_all_by_release_name(self, release_name: str) -> Dict[int, AppDeployerData]:
        result = {}
        for version in sorted(self.store.versions(release_name)):
            data = await self.find_by_release_name_and_version(release_name, version)
            if data is not None:
                result[version] = data
        return result

    async def delete_all(self, release_name: str) -> None:
        self.store.delete_all(release_name)
