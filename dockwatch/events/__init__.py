"""Docker container event subscription.

- ContainerEvent: a parsed Docker container event
- ContainerObserver: interface for receiving start/die notifications
- EventSubscriber: keeps a Docker event subscription alive and feeds observers
"""

from dockwatch.events.base import ContainerEvent, ContainerEventStatus, ContainerObserver
from dockwatch.events.subscriber import EventSubscriber, ReconnectBackoff

__all__ = [
    "ContainerEvent",
    "ContainerEventStatus",
    "ContainerObserver",
    "EventSubscriber",
    "ReconnectBackoff",
]
