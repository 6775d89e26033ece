"""Container event types and the observer interface.

A ContainerEvent is the parsed form of one entry from Docker's event
stream. A ContainerObserver is whatever the caller wants notified when a
container starts or dies.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ContainerEventStatus(str, Enum):
    """Container lifecycle transitions we care about."""

    # Container started and is now running
    STARTED = "started"

    # Container process exited (graceful or not)
    DIED = "died"

    # Anything else (create, destroy, exec_start, health_status, ...)
    OTHER = "other"


# Docker event actions mapped to our statuses
DOCKER_ACTION_MAP = {
    "start": ContainerEventStatus.STARTED,
    "die": ContainerEventStatus.DIED,
}


@dataclass
class ContainerEvent:
    """A container state change event.

    Attributes:
        status: The lifecycle transition
        container_id: The container ID as reported by Docker
        action: Raw Docker action string
        timestamp: When the event occurred
    """

    status: ContainerEventStatus
    container_id: str
    action: str
    timestamp: datetime

    @classmethod
    def from_docker(cls, event: dict[str, Any]) -> ContainerEvent | None:
        """Parse a raw Docker event dict.

        Older daemons send the flat ``status``/``id`` fields; newer ones only
        send ``Action`` and ``Actor.ID``. Both are accepted.

        Returns:
            ContainerEvent for container events, None for other object types
            (networks, volumes, images, ...)
        """
        event_type = event.get("Type")
        if event_type is not None and event_type != "container":
            return None

        action = event.get("status") or event.get("Action") or ""
        # Handle compound actions like "exec_start: /bin/sh"
        action = action.split(":")[0]

        container_id = event.get("id") or (event.get("Actor") or {}).get("ID", "")

        timestamp_ns = event.get("timeNano", 0)
        if timestamp_ns:
            timestamp = datetime.fromtimestamp(timestamp_ns / 1e9, tz=timezone.utc)
        else:
            timestamp = datetime.now(timezone.utc)

        return cls(
            status=DOCKER_ACTION_MAP.get(action, ContainerEventStatus.OTHER),
            container_id=container_id,
            action=action,
            timestamp=timestamp,
        )


class ContainerObserver(ABC):
    """Receives container lifecycle notifications from an EventSubscriber.

    Methods are awaited one at a time, in the order events arrive. They may
    run on any task, and a slow implementation holds up every event behind
    it, so don't block indefinitely.
    """

    @abstractmethod
    async def container_started(self, container_id: str) -> None:
        """Called when a container starts."""

    @abstractmethod
    async def container_died(self, container_id: str) -> None:
        """Called when a container's main process exits."""
