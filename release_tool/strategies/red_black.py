# release_tool/strategies/red_black.py
"""Red/black upgrade strategy

New application instances are deployed next to the old ones, health
checked, and only then are the old instances retired.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .health_check import HealthChecker
from ..api.exceptions import (
    DeploymentFailedError,
    HealthCheckTimeoutError,
    InvalidStateTransitionError,
)
from ..constants import (
    DESC_CANCELLED,
    DESC_INSTALL_COMPLETE,
    DESC_INSTALL_UNDERWAY,
    DESC_ROLLBACK_COMPLETE,
    DESC_ROLLBACK_UNDERWAY,
    DESC_SUPERSEDED,
    DESC_UPGRADE_COMPLETE,
    DESC_UPGRADE_UNDERWAY,
)
from ..deployer.base import AppDeployer
from ..deployer.registry import DeployerRegistry
from ..models.difference import ReleaseAnalysisReport
from ..models.release import AppDeployerData, Release, ReleaseOperation, StatusCode
from ..repository.base import ReleaseRepository, AppDeployerDataRepository


class UpgradeState(Enum):
    """States of one upgrade attempt"""
    INIT = "init"
    DEPLOYING_NEW = "deploying_new"
    HEALTH_CHECK = "health_check"
    PROMOTING = "promoting"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLING = "cancelling"
    ROLLED_BACK = "rolled_back"

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS = {
    UpgradeState.INIT: {UpgradeState.DEPLOYING_NEW, UpgradeState.FAILED},
    UpgradeState.DEPLOYING_NEW: {UpgradeState.HEALTH_CHECK, UpgradeState.FAILED, UpgradeState.CANCELLING},
    UpgradeState.HEALTH_CHECK: {UpgradeState.PROMOTING, UpgradeState.FAILED, UpgradeState.CANCELLING},
    UpgradeState.PROMOTING: {UpgradeState.COMPLETED, UpgradeState.FAILED},
    UpgradeState.CANCELLING: {UpgradeState.ROLLED_BACK, UpgradeState.FAILED},
    UpgradeState.COMPLETED: set(),
    UpgradeState.FAILED: set(),
    UpgradeState.ROLLED_BACK: set(),
}

CANCELLABLE_STATES = (UpgradeState.INIT, UpgradeState.DEPLOYING_NEW, UpgradeState.HEALTH_CHECK)

UNDERWAY_DESCRIPTIONS = {
    ReleaseOperation.INSTALL: DESC_INSTALL_UNDERWAY,
    ReleaseOperation.UPGRADE: DESC_UPGRADE_UNDERWAY,
    ReleaseOperation.ROLLBACK: DESC_ROLLBACK_UNDERWAY,
}

COMPLETE_DESCRIPTIONS = {
    ReleaseOperation.INSTALL: DESC_INSTALL_COMPLETE,
    ReleaseOperation.UPGRADE: DESC_UPGRADE_COMPLETE,
    ReleaseOperation.ROLLBACK: DESC_ROLLBACK_COMPLETE,
}


@dataclass
class UpgradeContext:
    """Mutable state of one attempt"""
    report: ReleaseAnalysisReport
    operation: ReleaseOperation = ReleaseOperation.UPGRADE
    state: UpgradeState = UpgradeState.INIT
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
    new_deployments: Dict[str, str] = field(default_factory=dict)
    carried_over: Dict[str, str] = field(default_factory=dict)
    transitions: List[UpgradeState] = field(default_factory=lambda: [UpgradeState.INIT])
    error: Optional[str] = None

    @property
    def existing(self) -> Optional[Release]:
        return self.report.existing_release

    @property
    def replacing(self) -> Release:
        return self.report.replacing_release

    @property
    def release_name(self) -> str:
        return self.replacing.name

    @property
    def cancel_requested(self) -> bool:
        return self.cancel_event.is_set()

    def request_cancel(self) -> bool:
        """Ask the attempt to stop; False once it is past the point of no return"""
        if self.state not in CANCELLABLE_STATES:
            return False
        self.cancel_event.set()
        return True

    def deployment_data(self) -> Dict[str, str]:
        """Application to deployment id in manifest order"""
        ids = {**self.carried_over, **self.new_deployments}
        return {name: ids[name] for name in self.replacing.manifest.application_names if name in ids}


class RedBlackUpgradeStrategy:
    """Drives an UpgradeContext from INIT to a terminal state"""

    def __init__(self,
                 release_repository: ReleaseRepository,
                 app_deployer_data_repository: AppDeployerDataRepository,
                 deployer_registry: DeployerRegistry,
                 health_checker: Optional[HealthChecker] = None):
        self.release_repository = release_repository
        self.app_deployer_data_repository = app_deployer_data_repository
        self.deployer_registry = deployer_registry
        self.health_checker = health_checker or HealthChecker()
        self.logger = logging.getLogger("RedBlackUpgradeStrategy")

    def transition(self, context: UpgradeContext, target: UpgradeState) -> None:
        """
        Move to target state

        Raises:
            InvalidStateTransitionError: If the move is not allowed
        """
        source = context.state
        if target not in ALLOWED_TRANSITIONS[source]:
            raise InvalidStateTransitionError(context.release_name, source, target)
        context.state = target
        context.transitions.append(target)
        self.logger.info(f"{context.replacing}: {source.value} -> {target.value}")

    def cancel(self, context: UpgradeContext) -> bool:
        """Request cancellation of a running attempt"""
        accepted = context.request_cancel()
        if accepted:
            self.logger.info(f"{context.replacing}: cancel requested during {context.state.value}")
        return accepted

    async def run(self, context: UpgradeContext) -> Release:
        """
        Run the attempt to a terminal state

        Failures are recorded on the replacing release rather than raised.

        Returns:
            The replacing release in its final state
        """
        try:
            await self._run(context)
        except Exception as e:
            if context.state.is_terminal:
                raise
            self.logger.exception(f"{context.replacing}: unexpected error during {context.state.value}")
            await self._fail(context, f"{type(e).__name__}: {e}")
        return context.replacing

    async def _run(self, context: UpgradeContext) -> None:
        replacing = context.replacing
        deployer = self.deployer_registry.get(replacing.platform_name)

        self.transition(context, UpgradeState.DEPLOYING_NEW)
        replacing.set_status(StatusCode.DEPLOYING, UNDERWAY_DESCRIPTIONS[context.operation])
        await self.release_repository.save(replacing)

        existing_ids = await self._existing_deployments(context)
        try:
            await self._deploy_new(context, deployer, existing_ids)
        except DeploymentFailedError as e:
            self.logger.error(f"{replacing}: {e}")
            await self._fail(context, str(e))
            return

        if context.cancel_requested:
            await self._cancel(context, deployer)
            return

        self.transition(context, UpgradeState.HEALTH_CHECK)
        try:
            healthy = await self.health_checker.wait_until_healthy(
                deployer, context.new_deployments, context.cancel_event
            )
        except HealthCheckTimeoutError as e:
            self.logger.error(f"{replacing}: {e}")
            await self._fail(context, str(e))
            return

        if not healthy:
            await self._cancel(context, deployer)
            return

        self.transition(context, UpgradeState.PROMOTING)
        await self._promote(context, deployer, existing_ids)
        self.transition(context, UpgradeState.COMPLETED)

    async def _existing_deployments(self, context: UpgradeContext) -> Dict[str, str]:
        existing = context.existing
        if existing is None:
            return {}
        data = await self.app_deployer_data_repository.find_by_release_name_and_version(
            existing.name, existing.version
        )
        return dict(data.deployment_data) if data else {}

    async def _deploy_new(self,
                          context: UpgradeContext,
                          deployer: AppDeployer,
                          existing_ids: Dict[str, str]) -> None:
        replacing = context.replacing
        upgrade_names = set(context.report.application_names_to_upgrade)

        for app_spec in replacing.manifest.app_specs:
            name = app_spec.application_name
            if name not in upgrade_names and name in existing_ids:
                context.carried_over[name] = existing_ids[name]
                self.logger.debug(f"{replacing}: carrying over {name} ({existing_ids[name]})")

        for app_spec in replacing.manifest.app_specs:
            name = app_spec.application_name
            if name in context.carried_over:
                continue
            if context.cancel_requested:
                break

            self.logger.debug(f"{replacing}: deploying {app_spec.resource_location} as {name}")
            try:
                deployment_id = await deployer.deploy(app_spec, replacing.name, replacing.version)
            except Exception as e:
                await self._save_deployment_data(context)
                raise DeploymentFailedError(name, e, succeeded=context.new_deployments.keys())
            context.new_deployments[name] = deployment_id

        await self._save_deployment_data(context)

    async def _promote(self,
                       context: UpgradeContext,
                       deployer: AppDeployer,
                       existing_ids: Dict[str, str]) -> None:
        replacing = context.replacing
        await self._apply_in_place_updates(context, deployer)

        retired = [name for name in context.new_deployments if name in existing_ids]
        retired.extend(name for name in context.report.removed_application_names if name in existing_ids)
        for name in retired:
            self.logger.debug(f"{replacing}: undeploying old {name} ({existing_ids[name]})")
            await deployer.undeploy(existing_ids[name])

        replacing.set_status(StatusCode.DEPLOYED, COMPLETE_DESCRIPTIONS[context.operation])
        await self.release_repository.save(replacing)

        existing = context.existing
        if existing is not None and existing.version != replacing.version:
            existing.set_status(StatusCode.DELETED, DESC_SUPERSEDED.format(version=replacing.version))
            await self.release_repository.save(existing)

    async def _apply_in_place_updates(self, context: UpgradeContext, deployer: AppDeployer) -> None:
        names = [n for n in context.report.in_place_update_names if n in context.carried_over]
        if not names:
            return
        if not deployer.supports_in_place_update:
            self.logger.warning(
                f"{context.replacing}: deployment properties changed for {', '.join(names)} "
                f"but {deployer.__class__.__name__} cannot update running deployments; "
                f"use force to redeploy them"
            )
            return
        for name in names:
            self.logger.debug(f"{context.replacing}: updating deployment properties of {name}")
            await deployer.update(context.carried_over[name], context.replacing.manifest.find(name))

    async def _cancel(self, context: UpgradeContext, deployer: AppDeployer) -> None:
        interrupted = context.state
        self.transition(context, UpgradeState.CANCELLING)

        for name, deployment_id in list(context.new_deployments.items()):
            self.logger.debug(f"{context.replacing}: undeploying new {name} ({deployment_id})")
            await deployer.undeploy(deployment_id)
            del context.new_deployments[name]
        await self._save_deployment_data(context)

        context.replacing.set_status(StatusCode.FAILED, DESC_CANCELLED.format(state=interrupted.value))
        await self.release_repository.save(context.replacing)
        self.transition(context, UpgradeState.ROLLED_BACK)

    async def _fail(self, context: UpgradeContext, description: str) -> None:
        context.error = description
        self.transition(context, UpgradeState.FAILED)
        await self._save_deployment_data(context)
        context.replacing.set_status(StatusCode.FAILED, description)
        await self.release_repository.save(context.replacing)

    async def _save_deployment_data(self, context: UpgradeContext) -> None:
        await self.app_deployer_data_repository.save(AppDeployerData(
            release_name=context.replacing.name,
            release_version=context.replacing.version,
            deployment_data=context.deployment_data()
        ))
