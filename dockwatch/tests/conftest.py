"""Shared pytest fixtures for dockwatch tests."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from dockwatch.events.base import ContainerEvent, ContainerEventStatus, ContainerObserver


# --- Fakes ---

class FakeEventStream:
    """In-memory stand-in for dockwatch.client.EventStream."""

    def __init__(self, events=()):
        self._events = list(events)
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.closed or not self._events:
            raise StopAsyncIteration
        return self._events.pop(0)

    def close(self):
        self.closed = True


class RecordingSleep:
    """Stands in for asyncio.sleep.

    Records every requested delay without waiting, and cancels the calling
    task once `limit` delays have been requested so the otherwise endless
    subscription loop ends.
    """

    def __init__(self, limit: int):
        self.limit = limit
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if len(self.delays) >= self.limit:
            raise asyncio.CancelledError()
        await asyncio.sleep(0)


class RecordingObserver(ContainerObserver):
    """Observer that remembers every call."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    async def container_started(self, container_id: str) -> None:
        self.calls.append(("started", container_id))

    async def container_died(self, container_id: str) -> None:
        self.calls.append(("died", container_id))


def _make_event(action: str, container_id: str) -> ContainerEvent:
    status = {
        "start": ContainerEventStatus.STARTED,
        "die": ContainerEventStatus.DIED,
    }.get(action, ContainerEventStatus.OTHER)
    return ContainerEvent(
        status=status,
        container_id=container_id,
        action=action,
        timestamp=datetime.now(timezone.utc),
    )


# --- Fixtures ---

@pytest.fixture
def observer() -> RecordingObserver:
    """An observer that records calls."""
    return RecordingObserver()


@pytest.fixture
def make_stream():
    """Factory for fake event streams."""
    return FakeEventStream


@pytest.fixture
def make_event():
    """Factory for ContainerEvent objects: make_event("start", "abc")."""
    return _make_event


@pytest.fixture
def recording_sleep():
    """Factory for RecordingSleep: recording_sleep(limit=3)."""
    return RecordingSleep


@pytest.fixture
def inspect_attrs():
    """Factory for container inspect documents."""

    def _attrs(
        networks: dict[str, str] | None = None,
        ip_address: str = "",
        network_mode: str = "default",
        running: bool = True,
        restarting: bool = False,
    ) -> dict:
        network_settings: dict = {"IPAddress": ip_address}
        if networks is not None:
            network_settings["Networks"] = {
                name: {"IPAddress": ip} for name, ip in networks.items()
            }
        else:
            network_settings["Networks"] = None
        return {
            "Id": "0123456789ab",
            "State": {"Running": running, "Restarting": restarting},
            "HostConfig": {"NetworkMode": network_mode},
            "NetworkSettings": network_settings,
        }

    return _attrs
