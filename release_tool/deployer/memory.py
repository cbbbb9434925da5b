# release_tool/deployer/memory.py
"""In-process deployer keeping deployments in a dictionary"""

from dataclasses import dataclass, field
from typing import Dict, Any, List

from .base import AppDeployer
from ..constants import ATTR_APPLICATION_NAME, ATTR_RELEASE_NAME, ATTR_RELEASE_VERSION
from ..models.manifest import AppSpec
from ..models.release import AppStatus, DeploymentState


@dataclass
class InMemoryDeployment:
    """One running deployment"""
    deployment_id: str
    app_spec: AppSpec
    release_name: str
    release_version: int
    state: DeploymentState = DeploymentState.DEPLOYED
    attributes: Dict[str, str] = field(default_factory=dict)


class InMemoryAppDeployer(AppDeployer):
    """Deployer that only records deployments

    Options:
        initial_state: State reported for new deployments (default: deployed)
        fail_on: Application names whose deploy() raises
    """

    supports_in_place_update = True

    def __init__(self, config: Dict[str, Any] = None):
        super().__init__(config)
        self.initial_state = DeploymentState(self.config.get('initial_state', 'deployed'))
        self.fail_on: List[str] = list(self.config.get('fail_on', []))
        self.deployments: Dict[str, InMemoryDeployment] = {}

    async def deploy(self, app_spec: AppSpec, release_name: str, release_version: int) -> str:
        if app_spec.application_name in self.fail_on:
            raise RuntimeError(f"Deployment of {app_spec.application_name} rejected by platform")

        deployment_id = f"{release_name}-v{release_version}-{app_spec.application_name}"
        self.deployments[deployment_id] = InMemoryDeployment(
            deployment_id=deployment_id,
            app_spec=app_spec,
            release_name=release_name,
            release_version=release_version,
            state=self.initial_state,
            attributes={
                ATTR_APPLICATION_NAME: app_spec.application_name,
                ATTR_RELEASE_NAME: release_name,
                ATTR_RELEASE_VERSION: str(release_version),
                'resource': app_spec.resource_location,
            }
        )
        self.logger.debug(f"Deployed {deployment_id} ({app_spec.resource_location})")
        return deployment_id

    async def undeploy(self, deployment_id: str) -> None:
        if self.deployments.pop(deployment_id, None) is None:
            self.logger.debug(f"Undeploy of unknown deployment {deployment_id} ignored")
        else:
            self.logger.debug(f"Undeployed {deployment_id}")

    async def status(self, deployment_id: str) -> AppStatus:
        deployment = self.deployments.get(deployment_id)
        if deployment is None:
            return AppStatus(deployment_id=deployment_id, state=DeploymentState.UNDEPLOYED)
        return AppStatus(
            deployment_id=deployment_id,
            state=deployment.state,
            attributes=dict(deployment.attributes)
        )

    async def update(self, deployment_id: str, app_spec: AppSpec) -> None:
        deployment = self.deployments.get(deployment_id)
        if deployment is None:
            raise KeyError(f"Unknown deployment: {deployment_id}")
        deployment.app_spec = app_spec
        self.logger.debug(f"Updated deployment properties of {deployment_id}")

    def set_state(self, deployment_id: str, state: DeploymentState) -> None:
        """Change the state reported for a deployment"""
        self.deployments[deployment_id].state = state

    async def _do_close(self) -> None:
        self.deployments.clear()
