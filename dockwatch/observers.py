"""Container observers shipped with the agent.

LoggingObserver just logs transitions. ControllerForwarder POSTs them to
the controller so it can keep node state in sync without polling.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx

from dockwatch.events.base import ContainerEventStatus, ContainerObserver

logger = logging.getLogger(__name__)


class LoggingObserver(ContainerObserver):
    """Logs container starts and deaths."""

    async def container_started(self, container_id: str) -> None:
        logger.info(f"Container started: {container_id}")

    async def container_died(self, container_id: str) -> None:
        logger.info(f"Container died: {container_id}")


class ControllerForwarder(ContainerObserver):
    """Forwards container events to the controller.

    Each event is POSTed to ``<controller_url>/events/container``. Delivery
    is best effort: failures are logged and the event is dropped, so a
    controller outage never stalls the event stream for longer than the
    request timeout.
    """

    def __init__(self, controller_url: str, agent_id: str, timeout: float = 5.0):
        self.controller_url = controller_url.rstrip("/")
        self.agent_id = agent_id
        self.timeout = timeout

    async def container_started(self, container_id: str) -> None:
        await self._forward(container_id, ContainerEventStatus.STARTED)

    async def container_died(self, container_id: str) -> None:
        await self._forward(container_id, ContainerEventStatus.DIED)

    async def _forward(self, container_id: str, status: ContainerEventStatus) -> None:
        payload = {
            "agent_id": self.agent_id,
            "container_id": container_id,
            "event": status.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.controller_url}/events/container",
                    json=payload,
                    timeout=self.timeout,
                )
            if response.status_code == 200:
                logger.debug(f"Forwarded event: {status.value} for {container_id}")
            else:
                logger.warning(f"Failed to forward event: HTTP {response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"Error forwarding event to controller: {e}")
