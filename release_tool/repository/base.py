# release_tool/repository/base.py
"""Release repository abstract base classes"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..api.exceptions import ReleaseNotFoundError, RepositoryError, InvalidVersionError
from ..models.release import Release, AppDeployerData, StatusCode


class ReleaseRepository(ABC):
    """Versioned store of releases

    Subclasses provide raw storage; the invariants live here:
    versions per name are contiguous from 1, and the manifest of a stored
    version never changes.
    """

    @abstractmethod
    async def _get(self, name: str, version: int) -> Optional[Release]:
        """Load one release or None"""
        pass

    @abstractmethod
    async def _put(self, release: Release) -> None:
        """Store one release, replacing any previous record of that version"""
        pass

    @abstractmethod
    async def _versions(self, name: str) -> List[int]:
        """Stored versions of a release, in any order"""
        pass

    @abstractmethod
    async def names(self) -> List[str]:
        """Names of all stored releases"""
        pass

    @abstractmethod
    async def delete_all(self, name: str) -> None:
        """Remove every version of a release"""
        pass

    async def save(self, release: Release) -> Release:
        """
        Save a release

        A new version must directly follow the latest stored one. An
        existing version may be re-saved (status updates) but its
        manifest must not change.

        Raises:
            InvalidVersionError: If version is not positive
            RepositoryError: If a save breaks version order or manifest immutability
        """
        if release.version < 1:
            raise InvalidVersionError(release.version)

        existing = await self._get(release.name, release.version)
        if existing is not None:
            if existing.manifest != release.manifest:
                raise RepositoryError(f"Manifest of release {release} is immutable")
        else:
            latest = await self.latest_version(release.name)
            if release.version != latest + 1:
                raise RepositoryError(
                    f"Cannot save {release}: next version of [{release.name}] is {latest + 1}"
                )

        await self._put(release)
        return release

    async def latest_version(self, name: str) -> int:
        """Highest stored version, 0 if none"""
        versions = await self._versions(name)
        return max(versions) if versions else 0

    async def exists(self, name: str) -> bool:
        return bool(await self._versions(name))

    async def find_by_name_and_version(self, name: str, version: int) -> Release:
        """
        Raises:
            ReleaseNotFoundError: If the version does not exist
        """
        release = await self._get(name, version)
        if release is None:
            raise ReleaseNotFoundError(name, version)
        return release

    async def find_all_by_name(self, name: str) -> List[Release]:
        """All versions of a release, newest first"""
        releases = []
        for version in sorted(await self._versions(name), reverse=True):
            release = await self._get(name, version)
            if release is not None:
                releases.append(release)
        return releases

    async def find_release_revisions(self, name: str, max_revisions: Optional[int] = None) -> List[Release]:
        """Newest first, at most max_revisions entries"""
        releases = await self.find_all_by_name(name)
        if max_revisions is not None:
            releases = releases[:max(max_revisions, 0)]
        return releases

    async def find_latest_by_name(self, name: str) -> Optional[Release]:
        """Highest version regardless of status"""
        latest = await self.latest_version(name)
        if latest == 0:
            return None
        return await self._get(name, latest)

    async def find_current_by_name(self, name: str) -> Optional[Release]:
        """Highest version that is not deleted"""
        for release in await self.find_all_by_name(name):
            if not release.is_deleted:
                return release
        return None

    async def find_latest_deployed_by_name(self, name: str) -> Optional[Release]:
        """Highest version currently deployed"""
        for release in await self.find_all_by_name(name):
            if release.status_code == StatusCode.DEPLOYED:
                return release
        return None

    async def find_latest_deployed_or_failed(self) -> List[Release]:
        """For every name, the latest release that is deployed or failed"""
        result = []
        for name in sorted(await self.names()):
            for release in await self.find_all_by_name(name):
                if release.status_code in (StatusCode.DEPLOYED, StatusCode.FAILED):
                    result.append(release)
                    break
        return result


class AppDeployerDataRepository(ABC):
    """Store of application to deployment id mappings per release version"""

    @abstractmethod
    async def save(self, data: AppDeployerData) -> AppDeployerData:
        pass

    @abstractmethod
    async def find_by_release_name_and_version(self,
                                               release_name: str,
                                               release_version: int) -> Optional[AppDeployerData]:
        pass

    @abstractmethod
    async def find_all_by_release_name(self, release_name: str) -> Dict[int, AppDeployerData]:
        """Every record of a release keyed by version"""
        pass

    @abstractmethod
    async def delete_all(self, release_name: str) -> None:
        pass
