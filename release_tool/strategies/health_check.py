# release_tool/strategies/health_check.py
"""Health check poller for newly deployed applications"""

import asyncio
import logging
from typing import Dict, List, Optional

from ..api.exceptions import HealthCheckTimeoutError
from ..deployer.base import AppDeployer
from ..models.config import HealthCheckConfig
from ..utils.async_utils import wait_for_event


class HealthChecker:
    """Polls deployer status until every application reports deployed"""

    def __init__(self, config: Optional[HealthCheckConfig] = None):
        self.config = config or HealthCheckConfig()
        self.logger = logging.getLogger("HealthChecker")

    async def unhealthy_applications(self,
                                     deployer: AppDeployer,
                                     deployments: Dict[str, str]) -> List[str]:
        """
        Names of applications not yet healthy

        A failing status call counts as unhealthy for this poll.

        Args:
            deployer: Deployer to query
            deployments: Application name to deployment id

        Returns:
            Unhealthy application names
        """
        unhealthy = []
        for application_name, deployment_id in deployments.items():
            try:
                status = await deployer.status(deployment_id)
            except Exception as e:
                self.logger.warning(f"Status of {application_name} ({deployment_id}) failed: {e}")
                unhealthy.append(application_name)
                continue
            if not status.is_healthy:
                unhealthy.append(application_name)
        return unhealthy

    async def wait_until_healthy(self,
                                 deployer: AppDeployer,
                                 deployments: Dict[str, str],
                                 cancel_event: Optional[asyncio.Event] = None) -> bool:
        """
        Poll until all applications are healthy

        Args:
            deployer: Deployer to query
            deployments: Application name to deployment id
            cancel_event: Set to stop waiting between polls

        Returns:
            True when all are healthy, False if cancelled

        Raises:
            HealthCheckTimeoutError: If the timeout elapses first
        """
        cancel_event = cancel_event or asyncio.Event()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.timeout_seconds
        polls = 0

        while True:
            if cancel_event.is_set():
                return False

            polls += 1
            unhealthy = await self.unhealthy_applications(deployer, deployments)
            if not unhealthy:
                self.logger.debug(f"All {len(deployments)} application(s) healthy after {polls} poll(s)")
                return True

            remaining = deadline - loop.time()
            if remaining <= 0:
                raise HealthCheckTimeoutError(self.config.timeout_seconds, unhealthy)

            self.logger.debug(f"Waiting for {', '.join(unhealthy)}")
            if await wait_for_event(cancel_event, min(self.config.interval_seconds, remaining)):
                return False
