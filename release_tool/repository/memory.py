# release_tool/repository/memory.py
"""In-memory repositories"""

import copy
from typing import Dict, List, Optional

from .base import ReleaseRepository, AppDeployerDataRepository
from ..models.release import Release, AppDeployerData


class InMemoryReleaseRepository(ReleaseRepository):
    """Keeps copies of releases so callers cannot change stored records in place"""

    def __init__(self):
        self._releases: Dict[str, Dict[int, Release]] = {}

    async def _get(self, name: str, version: int) -> Optional[Release]:
        release = self._releases.get(name, {}).get(version)
        return copy.deepcopy(release) if release is not None else None

    async def _put(self, release: Release) -> None:
        self._releases.setdefault(release.name, {})[release.version] = copy.deepcopy(release)

    async def _versions(self, name: str) -> List[int]:
        return list(self._releases.get(name, {}))

    async def names(self) -> List[str]:
        return list(self._releases)

    async def delete_all(self, name: str) -> None:
        self._releases.pop(name, None)


class InMemoryAppDeployerDataRepository(AppDeployerDataRepository):

    def __init__(self):
        self._data: Dict[str, Dict[int, AppDeployerData]] = {}

    async def save(self, data: AppDeployerData) -> AppDeployerData:
        self._data.setdefault(data.release_name, {})[data.release_version] = copy.deepcopy(data)
        return data

    async def find_by_release_name_and_version(self,
                                               release_name: str,
                                               release_version: int) -> Optional[AppDeployerData]:
        data = self._data.get(release_name, {}).get(release_version)
        return copy.deepcopy(data) if data is not None else None

    async def find_all_by_release_name(self, release_name: str) -> Dict[int, AppDeployerData]:
        return copy.deepcopy(self._data.get(release_name, {}))

    async def delete_all(self, release_name: str) -> None:
        self._data.pop(release_name, None)
