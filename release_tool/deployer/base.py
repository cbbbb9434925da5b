# release_tool/deployer/base.py
"""Application deployer abstract base class"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Any

from ..models.manifest import AppSpec
from ..models.release import AppStatus


class AppDeployer(ABC):
    """Abstract base class for platform deployers

    A deployer starts and stops application instances on one platform.
    Every call is treated as fallible I/O and is never retried by the caller.
    """

    # Deployers able to apply deployment property changes to a running
    # instance set this and implement update()
    supports_in_place_update = False

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize deployer

        Args:
            config: Deployer-specific options
        """
        self.config = config or {}
        self._initialized = False
        self.logger = logging.getLogger(self.__class__.__name__)

    async def initialize(self) -> None:
        """Initialize deployer (e.g., connect to the platform)"""
        if not self._initialized:
            await self._do_initialize()
            self._initialized = True

    async def _do_initialize(self) -> None:
        """Actual initialization logic, overridden by subclasses that need it"""
        pass

    @abstractmethod
    async def deploy(self, app_spec: AppSpec, release_name: str, release_version: int) -> str:
        """
        Start a new instance of an application

        Args:
            app_spec: Application to deploy
            release_name: Owning release
            release_version: Owning release version

        Returns:
            Platform-assigned deployment id
        """
        pass

    @abstractmethod
    async def undeploy(self, deployment_id: str) -> None:
        """
        Stop and remove a deployment

        Args:
            deployment_id: Id returned by deploy()
        """
        pass

    @abstractmethod
    async def status(self, deployment_id: str) -> AppStatus:
        """
        Get live status of a deployment

        Args:
            deployment_id: Id returned by deploy()

        Returns:
            AppStatus
        """
        pass

    async def update(self, deployment_id: str, app_spec: AppSpec) -> None:
        """
        Apply new deployment properties to a running deployment

        Args:
            deployment_id: Id returned by deploy()
            app_spec: Application spec carrying the new properties
        """
        raise NotImplementedError(f"{self.__class__.__name__} does not support in-place updates")

    async def close(self) -> None:
        """Close deployer connections"""
        if self._initialized:
            await self._do_close()
            self._initialized = False

    async def _do_close(self) -> None:
        """Actual cleanup logic to be implemented by subclasses"""
        pass

    async def __aenter__(self):
        """Async context manager entry"""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
