# release_tool/services/release_service.py
"""Release service: install, upgrade, rollback, delete and query releases

State-changing operations return as soon as the new release record is
saved; the rollout continues in a task owned by the service. At most one
such operation runs per release name.
"""

import asyncio
import copy
import logging
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Union

from .package_service import PackageSource, create_package_source
from .release_manager import ReleaseManager
from ..api.exceptions import (
    InvalidVersionError,
    ReleaseAlreadyExistsError,
    ReleaseNotFoundError,
    ReleaseUpgradeError,
    UpgradeInProgressError,
    ValidationError,
)
from ..constants import (
    DEFAULT_PLATFORM_NAME,
    DESC_INSTALL_UNDERWAY,
    DESC_ROLLBACK_UNDERWAY,
    DESC_UPGRADE_UNDERWAY,
    RELEASE_NAME_PATTERN,
)
from ..core.manifest_renderer import ManifestRenderer
from ..core.release_analyzer import ReleaseAnalyzer
from ..deployer.registry import DeployerRegistry
from ..models.config import ReleaseToolConfig
from ..models.manifest import Manifest
from ..models.package import ConfigValues, PackageReference
from ..models.release import Release, ReleaseInfo, ReleaseOperation, Status, StatusCode
from ..repository.base import ReleaseRepository, AppDeployerDataRepository
from ..repository.factory import create_repositories
from ..strategies.health_check import HealthChecker
from ..strategies.red_black import RedBlackUpgradeStrategy, UpgradeContext


class ReleaseLocks:
    """Non-queuing single-writer guard keyed by release name"""

    def __init__(self):
        self._holders: Dict[str, ReleaseOperation] = {}

    def try_acquire(self, release_name: str, operation: ReleaseOperation) -> None:
        """
        Take the lock or fail immediately

        Raises:
            UpgradeInProgressError: If another operation holds the lock
        """
        holder = self._holders.get(release_name)
        if holder is not None:
            raise UpgradeInProgressError(release_name, holder.value)
        self._holders[release_name] = operation

    def release(self, release_name: str) -> None:
        self._holders.pop(release_name, None)

    def is_locked(self, release_name: str) -> bool:
        return release_name in self._holders


def _to_reference(package_ref: Union[str, PackageReference]) -> PackageReference:
    if isinstance(package_ref, str):
        package_ref = PackageReference.parse(package_ref)
    if not package_ref.name:
        raise ValidationError("Package name must not be empty")
    return package_ref


def _to_values(config_values: Union[None, str, ConfigValues]) -> Optional[ConfigValues]:
    if config_values is None or isinstance(config_values, ConfigValues):
        return config_values
    return ConfigValues.of(config_values)


def _validate_release_name(release_name: str) -> None:
    if not release_name:
        raise ValidationError("Release name must not be empty")
    if not RELEASE_NAME_PATTERN.match(release_name):
        raise ValidationError(f"Invalid release name: {release_name}")


class ReleaseService:
    """Public façade over rendering, analysis and the upgrade strategy"""

    def __init__(self,
                 package_source: PackageSource,
                 release_repository: ReleaseRepository,
                 app_deployer_data_repository: AppDeployerDataRepository,
                 deployer_registry: DeployerRegistry,
                 health_checker: Optional[HealthChecker] = None,
                 renderer: Optional[ManifestRenderer] = None,
                 analyzer: Optional[ReleaseAnalyzer] = None):
        self.package_source = package_source
        self.release_repository = release_repository
        self.app_deployer_data_repository = app_deployer_data_repository
        self.deployer_registry = deployer_registry
        self.renderer = renderer or ManifestRenderer()
        self.analyzer = analyzer or ReleaseAnalyzer()
        self.release_manager = ReleaseManager(
            release_repository, app_deployer_data_repository, deployer_registry
        )
        self.strategy = RedBlackUpgradeStrategy(
            release_repository,
            app_deployer_data_repository,
            deployer_registry,
            health_checker or HealthChecker()
        )
        self.locks = ReleaseLocks()
        self._tasks: Dict[str, asyncio.Task] = {}
        self._contexts: Dict[str, UpgradeContext] = {}
        self.logger = logging.getLogger("ReleaseService")

    @classmethod
    def from_config(cls, config: ReleaseToolConfig) -> 'ReleaseService':
        """Build a service with the collaborators named in configuration"""
        release_repository, app_deployer_data_repository = create_repositories(config.repository)
        return cls(
            package_source=create_package_source(config.packages),
            release_repository=release_repository,
            app_deployer_data_repository=app_deployer_data_repository,
            deployer_registry=DeployerRegistry.from_config(config.platforms),
            health_checker=HealthChecker(config.health_check)
        )

    # State-changing operations

    async def install(self,
                      package_ref: Union[str, PackageReference],
                      release_name: str,
                      platform_name: str = DEFAULT_PLATFORM_NAME,
                      config_values: Union[None, str, ConfigValues] = None,
                      strict: bool = False) -> Release:
        """
        Install a package as a new release

        Args:
            package_ref: Package reference ('name' or 'name:version')
            release_name: Release name
            platform_name: Platform to deploy to
            config_values: Override values (YAML)
            strict: Reject unknown override keys and unresolved placeholders

        Returns:
            The saved release, status DEPLOYING

        Raises:
            ValidationError, PlatformNotFoundError, ReleaseAlreadyExistsError,
            PackageNotFoundError, TemplateRenderError, UpgradeInProgressError
        """
        _validate_release_name(release_name)
        reference = _to_reference(package_ref)
        values = _to_values(config_values) or ConfigValues()
        self.deployer_registry.get(platform_name)

        self.locks.try_acquire(release_name, ReleaseOperation.INSTALL)
        try:
            current = await self.release_repository.find_current_by_name(release_name)
            if current is not None:
                raise ReleaseAlreadyExistsError(release_name, current.version)

            package = await self.package_source.resolve(reference.name, reference.version)
            manifest = self.renderer.render(package, values, strict)

            release = Release(
                name=release_name,
                version=await self.release_repository.latest_version(release_name) + 1,
                package=package.reference,
                manifest=manifest,
                platform_name=platform_name,
                config_values=values,
                status=Status(StatusCode.DEPLOYING, description=DESC_INSTALL_UNDERWAY)
            )
            await self.release_repository.save(release)

            report = self.analyzer.analyze(None, release)
            self._start(UpgradeContext(report=report, operation=ReleaseOperation.INSTALL))
        except BaseException:
            self.locks.release(release_name)
            raise

        self.logger.info(f"Installing {release} from {package.reference} on {platform_name}")
        return copy.deepcopy(release)

    async def upgrade(self,
                      release_name: str,
                      package_ref: Union[None, str, PackageReference] = None,
                      config_values: Union[None, str, ConfigValues] = None,
                      force: bool = False,
                      app_names: Optional[Iterable[str]] = None,
                      strict: bool = False) -> Release:
        """
        Upgrade a release to a new package version and/or values

        Args:
            release_name: Release name
            package_ref: Package reference; None keeps the current package
            config_values: Override values; None keeps the current values
            force: Redeploy even unchanged applications
            app_names: With force, only these applications are forced
            strict: Reject unknown override keys and unresolved placeholders

        Returns:
            The saved candidate release, status DEPLOYING

        Raises:
            ReleaseNotFoundError: If there is no current release
            ReleaseUpgradeError: If nothing changed and force is not set
        """
        _validate_release_name(release_name)
        self.locks.try_acquire(release_name, ReleaseOperation.UPGRADE)
        try:
            existing = await self._serving_release(release_name)
            if existing is None:
                raise ReleaseNotFoundError(release_name)

            reference = existing.package if package_ref is None else _to_reference(package_ref)
            values = _to_values(config_values)
            if values is None:
                values = existing.config_values

            package = await self.package_source.resolve(reference.name, reference.version)
            manifest = self.renderer.render(package, values, strict)

            candidate = Release(
                name=release_name,
                version=await self.release_repository.latest_version(release_name) + 1,
                package=package.reference,
                manifest=manifest,
                platform_name=existing.platform_name,
                config_values=values,
                status=Status(StatusCode.DEPLOYING, description=DESC_UPGRADE_UNDERWAY)
            )

            report = self.analyzer.analyze(existing, candidate, force=force, app_names=app_names)
            if report.release_difference.are_equal and not force:
                raise ReleaseUpgradeError(
                    f"Package to upgrade has no difference than existing deployed/deleted package "
                    f"({existing}). Use force to redeploy"
                )

            await self.release_repository.save(candidate)
            self._start(UpgradeContext(report=report, operation=ReleaseOperation.UPGRADE))
        except BaseException:
            self.locks.release(release_name)
            raise

        self.logger.info(f"Upgrading {existing} to {candidate}: "
                         f"redeploy [{', '.join(report.application_names_to_upgrade)}]")
        return copy.deepcopy(candidate)

    async def rollback(self, release_name: str, version: Optional[int] = None) -> Release:
        """
        Redeploy the manifest of an earlier version as a new version

        Args:
            release_name: Release name
            version: Version to roll back to; None means the one before
                current, or the latest one if the release is deleted

        Returns:
            The saved candidate release, status DEPLOYING

        Raises:
            InvalidVersionError: If version is not positive
            ReleaseNotFoundError: If the release or version does not exist
        """
        if version is not None and version <= 0:
            raise InvalidVersionError(version)
        _validate_release_name(release_name)

        self.locks.try_acquire(release_name, ReleaseOperation.ROLLBACK)
        try:
            latest = await self.release_repository.find_latest_by_name(release_name)
            if latest is None:
                raise ReleaseNotFoundError(release_name)

            if version is None:
                current = await self.release_repository.find_current_by_name(release_name)
                if current is None:
                    # Fully deleted: restore what was deleted
                    version = latest.version
                elif current.version <= 1:
                    raise ReleaseUpgradeError(
                        f"Release [{release_name}] has no version before v{current.version} to roll back to"
                    )
                else:
                    version = current.version - 1

            target = await self.release_repository.find_by_name_and_version(release_name, version)
            existing = await self._serving_release(release_name)

            candidate = Release(
                name=release_name,
                version=latest.version + 1,
                package=target.package,
                manifest=target.manifest,
                platform_name=existing.platform_name if existing else target.platform_name,
                config_values=target.config_values,
                status=Status(StatusCode.DEPLOYING, description=DESC_ROLLBACK_UNDERWAY)
            )
            await self.release_repository.save(candidate)

            report = self.analyzer.analyze(existing, candidate)
            self._start(UpgradeContext(report=report, operation=ReleaseOperation.ROLLBACK))
        except BaseException:
            self.locks.release(release_name)
            raise

        self.logger.info(f"Rolling back {release_name} to the manifest of v{version} as {candidate}")
        return copy.deepcopy(candidate)

    async def delete(self, release_name: str) -> Release:
        """
        Undeploy every application of a release and mark it deleted

        Returns:
            The current release, status DELETING

        Raises:
            ValidationError: If the release name is invalid
            ReleaseNotFoundError: If there is no current release
        """
        _validate_release_name(release_name)
        self.locks.try_acquire(release_name, ReleaseOperation.DELETE)
        try:
            current = await self.release_repository.find_current_by_name(release_name)
            if current is None:
                raise ReleaseNotFoundError(release_name)

            releases = await self.release_manager.begin_delete(release_name)
            self._start_task(release_name, self.release_manager.complete_delete(releases))
        except BaseException:
            self.locks.release(release_name)
            raise

        self.logger.info(f"Deleting {release_name} ({len(releases)} version(s))")
        return copy.deepcopy(releases[0])

    async def cancel(self, release_name: str) -> bool:
        """
        Request cancellation of the running install/upgrade/rollback

        Returns:
            False if nothing cancellable is running
        """
        context = self._contexts.get(release_name)
        if context is None:
            return False
        return self.strategy.cancel(context)

    # Queries

    async def status(self, release_name: str, version: Optional[int] = None) -> ReleaseInfo:
        """
        Live status of a release version (latest if not given)

        Raises:
            ReleaseNotFoundError: If the release or version does not exist
        """
        release = await self._find(release_name, version)
        return await self.release_manager.status(release)

    async def history(self, release_name: str, max_revisions: Optional[int] = None) -> List[Release]:
        """
        Versions of a release, newest first

        Raises:
            ReleaseNotFoundError: If the release does not exist
        """
        _validate_release_name(release_name)
        releases = await self.release_repository.find_release_revisions(release_name, max_revisions)
        if not releases and not await self.release_repository.exists(release_name):
            raise ReleaseNotFoundError(release_name)
        return releases

    async def manifest(self, release_name: str, version: Optional[int] = None) -> Manifest:
        """Rendered manifest of a release version (latest if not given)"""
        return (await self._find(release_name, version)).manifest

    async def list_releases(self) -> List[Release]:
        """Latest deployed or failed release of every name"""
        return await self.release_repository.find_latest_deployed_or_failed()

    # Task management

    async def wait_for_completion(self, release_name: str) -> Optional[Release]:
        """
        Wait for the running operation of a release to finish

        Returns:
            Latest release record, or None if the release has no record

        Raises:
            Whatever the operation raised, if it was still running
        """
        _validate_release_name(release_name)
        task = self._tasks.get(release_name)
        if task is not None:
            await task
        return await self.release_repository.find_latest_by_name(release_name)

    def is_busy(self, release_name: str) -> bool:
        return self.locks.is_locked(release_name)

    async def initialize(self) -> None:
        await self.deployer_registry.initialize()

    async def close(self) -> None:
        """Wait for running operations, then close deployers"""
        tasks = list(self._tasks.values())
        if tasks:
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    self.logger.error(f"Operation failed during shutdown: {result}")
        await self.deployer_registry.close()

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # Internals

    async def _serving_release(self, release_name: str) -> Optional[Release]:
        """Latest deployed release, else the current one"""
        existing = await self.release_repository.find_latest_deployed_by_name(release_name)
        if existing is None:
            existing = await self.release_repository.find_current_by_name(release_name)
        return existing

    async def _find(self, release_name: str, version: Optional[int]) -> Release:
        _validate_release_name(release_name)
        if version is not None:
            if version <= 0:
                raise InvalidVersionError(version)
            return await self.release_repository.find_by_name_and_version(release_name, version)
        release = await self.release_repository.find_latest_by_name(release_name)
        if release is None:
            raise ReleaseNotFoundError(release_name)
        return release

    def _start(self, context: UpgradeContext) -> None:
        self._contexts[context.release_name] = context
        self._start_task(context.release_name, self.strategy.run(context))

    def _start_task(self, release_name: str, operation: Awaitable[Any]) -> None:
        async def run_locked():
            try:
                return await operation
            finally:
                self._contexts.pop(release_name, None)
                if self._tasks.get(release_name) is asyncio.current_task():
                    del self._tasks[release_name]
                self.locks.release(release_name)

        task = asyncio.create_task(run_locked(), name=f"release-{release_name}")
        task.add_done_callback(self._log_task_result)
        self._tasks[release_name] = task

    def _log_task_result(self, task: asyncio.Task) -> None:
        if task.cancelled():
            self.logger.warning(f"{task.get_name()} was cancelled")
            return
        error = task.exception()
        if error is not None:
            self.logger.error(f"{task.get_name()} failed: {error}")
