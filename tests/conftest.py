"""Shared fixtures for release-tool tests"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest

from release_tool.deployer.base import AppDeployer
from release_tool.deployer.registry import DeployerRegistry
from release_tool.models import (
    AppSpec,
    AppStatus,
    ConfigValues,
    DeploymentState,
    HealthCheckConfig,
    Package,
    Template,
)
from release_tool.repository.memory import InMemoryAppDeployerDataRepository, InMemoryReleaseRepository
from release_tool.services.package_service import InMemoryPackageSource
from release_tool.services.release_service import ReleaseService
from release_tool.strategies.health_check import HealthChecker


LOGGER_TEMPLATE = """\
apiVersion: release-tool/v1
kind: generic-app
metadata:
  name: logger-app
spec:
  resource: maven://org.example:logger-app
  version: ${version}
  applicationProperties:
    log.level: ${log.level}
  deploymentProperties:
    count: ${count}
"""

TIME_TEMPLATE = """\
apiVersion: release-tool/v1
kind: generic-app
metadata:
  name: time-app
spec:
  resource: maven://org.example:time-app
  version: 1.0.0
  applicationProperties:
    trigger.fixed-delay: 1000
"""


def make_logger_package(version: str = "1.0.0",
                        app_version: str = "1.0.0",
                        level: str = "INFO",
                        with_time_app: bool = False) -> Package:
    """The logger package used throughout the tests"""
    templates = [Template(name="logger.yml", data=LOGGER_TEMPLATE)]
    if with_time_app:
        templates.append(Template(name="time.yml", data=TIME_TEMPLATE))
    return Package(
        name="logger",
        version=version,
        maintainer="release-tool tests",
        templates=tuple(templates),
        config_values=ConfigValues.of(
            f"version: {app_version}\n"
            f"log:\n"
            f"  level: {level}\n"
            f"count: 1\n"
        )
    )


class RecordingDeployer(AppDeployer):
    """Deployer that records every call

    Options:
        fail_on: Application names whose deploy raises
        initial_state: State reported for new deployments
    """

    supports_in_place_update = True

    def __init__(self, config: Dict[str, Any] = None):
        super().__init__(config)
        self.fail_on = set(self.config.get('fail_on', []))
        self.initial_state = DeploymentState(self.config.get('initial_state', 'deployed'))
        self.calls: List[Tuple[str, str]] = []
        self.deployed: List[str] = []
        self.undeployed: List[str] = []
        self.updated: List[str] = []
        self.live: Dict[str, AppSpec] = {}
        self.states: Dict[str, DeploymentState] = {}
        self._counter = 0

    async def deploy(self, app_spec: AppSpec, release_name: str, release_version: int) -> str:
        self.calls.append(('deploy', app_spec.application_name))
        if app_spec.application_name in self.fail_on:
            raise RuntimeError(f"platform refused {app_spec.application_name}")
        self._counter += 1
        deployment_id = f"{app_spec.application_name}-{self._counter}"
        self.deployed.append(deployment_id)
        self.live[deployment_id] = app_spec
        self.states[deployment_id] = self.initial_state
        return deployment_id

    async def undeploy(self, deployment_id: str) -> None:
        self.calls.append(('undeploy', deployment_id))
        self.undeployed.append(deployment_id)
        self.live.pop(deployment_id, None)

    async def status(self, deployment_id: str) -> AppStatus:
        self.calls.append(('status', deployment_id))
        if deployment_id not in self.live:
            return AppStatus(deployment_id=deployment_id, state=DeploymentState.UNDEPLOYED)
        return AppStatus(deployment_id=deployment_id, state=self.states[deployment_id])

    async def update(self, deployment_id: str, app_spec: AppSpec) -> None:
        self.calls.append(('update', deployment_id))
        self.updated.append(deployment_id)
        self.live[deployment_id] = app_spec

    def set_state(self, deployment_id: str, state: DeploymentState) -> None:
        self.states[deployment_id] = state


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Yield to the event loop until predicate() holds"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def deployer() -> RecordingDeployer:
    return RecordingDeployer()


@pytest.fixture
def registry(deployer) -> DeployerRegistry:
    registry = DeployerRegistry()
    registry.register("default", deployer)
    return registry


@pytest.fixture
def release_repository() -> InMemoryReleaseRepository:
    return InMemoryReleaseRepository()


@pytest.fixture
def data_repository() -> InMemoryAppDeployerDataRepository:
    return InMemoryAppDeployerDataRepository()


@pytest.fixture
def health_config() -> HealthCheckConfig:
    return HealthCheckConfig(interval_seconds=0.01, timeout_seconds=0.5)


@pytest.fixture
def package_source() -> InMemoryPackageSource:
    return InMemoryPackageSource([
        make_logger_package("1.0.0"),
        make_logger_package("1.1.0", app_version="1.1.0"),
    ])


@pytest.fixture
def service(package_source, release_repository, data_repository, registry,
            health_config) -> ReleaseService:
    return ReleaseService(
        package_source=package_source,
        release_repository=release_repository,
        app_deployer_data_repository=data_repository,
        deployer_registry=registry,
        health_checker=HealthChecker(health_config)
    )


async def install_and_wait(service: ReleaseService,
                           package_ref: str = "logger:1.0.0",
                           release_name: str = "logger",
                           config_values: Optional[str] = None):
    await service.install(package_ref, release_name, config_values=config_values)
    return await service.wait_for_completion(release_name)
