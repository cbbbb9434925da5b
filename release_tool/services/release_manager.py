# release_tool/services/release_manager.py
"""Release operations against deployers and repositories"""

import copy
import logging
from typing import Dict, List, Tuple

from ..constants import (
    DESC_DELETE_COMPLETE,
    DESC_DELETING,
    PLATFORM_STATUS_ALL_DEPLOYED,
    PLATFORM_STATUS_NOT_ALL_DEPLOYED,
    PLATFORM_STATUS_NO_APPLICATIONS,
)
from ..deployer.registry import DeployerRegistry
from ..models.release import (
    AppStatus,
    DeploymentState,
    Release,
    ReleaseInfo,
    StatusCode,
)
from ..repository.base import ReleaseRepository, AppDeployerDataRepository


class ReleaseManager:
    """Status refresh and deletion of releases"""

    def __init__(self,
                 release_repository: ReleaseRepository,
                 app_deployer_data_repository: AppDeployerDataRepository,
                 deployer_registry: DeployerRegistry):
        self.release_repository = release_repository
        self.app_deployer_data_repository = app_deployer_data_repository
        self.deployer_registry = deployer_registry
        self.logger = logging.getLogger("ReleaseManager")

    async def status(self, release: Release) -> ReleaseInfo:
        """
        Point-in-time view of a release

        Works on a copy; the stored release is not modified. Deleted
        releases are reported as stored, without asking the deployer.

        Args:
            release: Release to inspect

        Returns:
            ReleaseInfo with live application statuses
        """
        snapshot = copy.deepcopy(release)
        app_statuses: Dict[str, AppStatus] = {}

        if not snapshot.is_deleted:
            data = await self.app_deployer_data_repository.find_by_release_name_and_version(
                snapshot.name, snapshot.version
            )
            deployments = data.deployment_data if data else {}
            if deployments:
                deployer = self.deployer_registry.get(snapshot.platform_name)
                for application_name, deployment_id in deployments.items():
                    try:
                        app_statuses[application_name] = await deployer.status(deployment_id)
                    except Exception as e:
                        self.logger.warning(f"Status of {application_name} ({deployment_id}) failed: {e}")
                        app_statuses[application_name] = AppStatus(
                            deployment_id=deployment_id,
                            state=DeploymentState.ERROR,
                            attributes={'error': str(e)}
                        )
            snapshot.status.platform_status = self._platform_status(app_statuses)

        return ReleaseInfo(
            name=snapshot.name,
            version=snapshot.version,
            platform_name=snapshot.platform_name,
            status=snapshot.status,
            app_statuses=app_statuses,
            created_at=snapshot.created_at,
            updated_at=snapshot.updated_at
        )

    @staticmethod
    def _platform_status(app_statuses: Dict[str, AppStatus]) -> str:
        if not app_statuses:
            return PLATFORM_STATUS_NO_APPLICATIONS
        pending = [f"{name}={status.state.value}"
                   for name, status in app_statuses.items() if not status.is_healthy]
        if not pending:
            return PLATFORM_STATUS_ALL_DEPLOYED
        return PLATFORM_STATUS_NOT_ALL_DEPLOYED.format(details=', '.join(pending))

    async def begin_delete(self, release_name: str) -> List[Release]:
        """Mark every non-deleted version DELETING, newest first"""
        releases = [r for r in await self.release_repository.find_all_by_name(release_name)
                    if not r.is_deleted]
        for release in releases:
            release.set_status(StatusCode.DELETING, DESC_DELETING)
            await self.release_repository.save(release)
        return releases

    async def complete_delete(self, releases: List[Release]) -> List[Release]:
        """
        Undeploy each recorded deployment once, then mark releases DELETED

        On a deployer failure the releases are marked FAILED and the
        error is re-raised.
        """
        if not releases:
            return releases

        # (platform, deployment id) pairs; carried-over ids are shared between versions
        deployment_ids: List[Tuple[str, str]] = []
        for release in releases:
            data = await self.app_deployer_data_repository.find_by_release_name_and_version(
                release.name, release.version
            )
            for deployment_id in (data.deployment_ids if data else []):
                key = (release.platform_name, deployment_id)
                if key not in deployment_ids:
                    deployment_ids.append(key)

        try:
            for platform_name, deployment_id in deployment_ids:
                self.logger.debug(f"Undeploying {deployment_id} from {platform_name}")
                await self.deployer_registry.get(platform_name).undeploy(deployment_id)
        except Exception as e:
            self.logger.error(f"Delete of {releases[0].name} failed: {e}")
            for release in releases:
                release.set_status(StatusCode.FAILED, f"Delete failed: {e}")
                await self.release_repository.save(release)
            raise

        for release in releases:
            release.set_status(StatusCode.DELETED, DESC_DELETE_COMPLETE)
            await self.release_repository.save(release)

        self.logger.info(f"Deleted {releases[0].name}: undeployed {len(deployment_ids)} deployment(s)")
        return releases
