"""Docker runtime client.

Thin wrapper over the Docker SDK for Python that gives the rest of the
package the handful of calls it needs (version probe, inspect, event
stream) with Docker SDK and transport exceptions translated into
RuntimeClientError.

The SDK client is created on first use. An agent that starts before the
Docker daemon is up therefore comes up fine, and the event subscriber keeps
retrying until the daemon appears.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import TYPE_CHECKING, Any

import docker
from docker.errors import DockerException, NotFound
from requests.exceptions import RequestException

from dockwatch.errors import ContainerNotFound, RuntimeClientError
from dockwatch.events.base import ContainerEvent

if TYPE_CHECKING:
    from dockwatch.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_DOCKER_SOCKET = "unix:///var/run/docker.sock"


def normalize_api_path(api_path: str) -> str:
    """Turn a user-supplied Docker address into a base URL.

    "1.2.3.4:2375" becomes "tcp://1.2.3.4:2375"; anything that already
    has a scheme is left alone; empty means the local socket.
    """
    if not api_path:
        return DEFAULT_DOCKER_SOCKET
    if "://" not in api_path:
        return f"tcp://{api_path}"
    return api_path


class EventStream:
    """Async iterator over Docker's event stream.

    Reads from the SDK's blocking stream in a worker thread and yields
    ContainerEvent objects. Iteration simply stops when the daemon closes
    the connection, the connection breaks, or close() is called.
    """

    def __init__(self, raw):
        self._raw = raw
        self._closed = False

    def __aiter__(self) -> EventStream:
        return self

    async def __anext__(self) -> ContainerEvent:
        while not self._closed:
            try:
                raw_event = await asyncio.to_thread(next, self._raw, None)
            except Exception as e:
                # A broken connection surfaces as whatever requests/urllib3
                # raise mid-read; for us that's just the end of the stream.
                if not self._closed:
                    logger.warning(f"Docker event stream read failed: {e}")
                raise StopAsyncIteration

            if raw_event is None:
                break

            event = ContainerEvent.from_docker(raw_event)
            if event is not None:
                return event

        raise StopAsyncIteration

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the underlying HTTP connection."""
        if self._closed:
            return
        self._closed = True
        self._raw.close()


class DockerClient:
    """Docker runtime client used by the subscriber and the resolver.

    Attributes:
        base_url: Docker API URL, or None to read DOCKER_HOST etc. from the
            environment
        api_version: Docker API version to request ("auto" or None to
            negotiate)
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_version: str | None = None,
        sdk: docker.DockerClient | None = None,
    ):
        self.base_url = base_url
        self.api_version = api_version
        self._sdk = sdk
        self._sdk_lock = threading.Lock()

    @classmethod
    def from_api_path(cls, api_path: str, api_version: str | None = None) -> DockerClient:
        """Create a client for an explicit address and check Docker answers.

        Raises:
            RuntimeClientError: If Docker cannot be reached
        """
        client = cls(base_url=normalize_api_path(api_path), api_version=api_version)
        client.check_working()
        return client

    @classmethod
    def from_env(cls, api_version: str | None = None) -> DockerClient:
        """Create a client from DOCKER_* environment variables and check it.

        Raises:
            RuntimeClientError: If Docker cannot be reached
        """
        client = cls(api_version=api_version)
        client.check_working()
        return client

    @classmethod
    def from_settings(cls, settings: Settings) -> DockerClient:
        """Create a client from settings without contacting Docker."""
        base_url = normalize_api_path(settings.docker_host) if settings.docker_host else None
        return cls(base_url=base_url, api_version=settings.docker_api_version or None)

    @property
    def sdk(self) -> docker.DockerClient:
        """The underlying Docker SDK client, created on first access."""
        with self._sdk_lock:
            if self._sdk is None:
                try:
                    if self.base_url:
                        self._sdk = docker.DockerClient(
                            base_url=self.base_url, version=self.api_version
                        )
                    else:
                        self._sdk = docker.from_env(version=self.api_version)
                except DockerException as e:
                    raise RuntimeClientError(f"Cannot connect to Docker: {e}") from e
            return self._sdk

    @property
    def endpoint(self) -> str:
        """Docker API endpoint this client talks to."""
        if self._sdk is not None:
            return self._sdk.api.base_url
        return self.base_url or "environment"

    def check_working(self) -> None:
        """Raise RuntimeClientError unless Docker answers a version request."""
        self.version()

    def version(self) -> dict[str, Any]:
        """Fetch Docker version information."""
        try:
            return self.sdk.version()
        except (DockerException, RequestException) as e:
            raise RuntimeClientError(str(e)) from e

    def info(self) -> str:
        """Human-readable one-line description of the Docker connection."""
        try:
            version = self.version()
        except RuntimeClientError as e:
            return f"Docker API error: {e}"
        return f"Docker API on {self.endpoint}: {version}"

    def inspect_container(self, container_id: str) -> dict[str, Any]:
        """Inspect a container by name or ID.

        Returns:
            The container's inspect document (``docker inspect`` output)

        Raises:
            ContainerNotFound: If Docker has no such container
            RuntimeClientError: For any other API failure
        """
        try:
            return self.sdk.containers.get(container_id).attrs
        except NotFound as e:
            raise ContainerNotFound(container_id) from e
        except (DockerException, RequestException) as e:
            raise RuntimeClientError(str(e)) from e

    def open_event_stream(self) -> EventStream:
        """Subscribe to Docker's container events.

        This is a blocking call; run it in a thread from async code.

        Raises:
            RuntimeClientError: If the subscription could not be established
        """
        try:
            raw = self.sdk.events(decode=True, filters={"type": "container"})
        except (DockerException, RequestException) as e:
            raise RuntimeClientError(str(e)) from e
        return EventStream(raw)

    def is_container_not_running(self, container_id: str) -> bool:
        """True if Docker confirms the container is not running.

        A container that doesn't exist, has stopped, or is restarting counts
        as not running. If Docker can't be asked, we don't claim anything.
        """
        try:
            attrs = self.inspect_container(container_id)
        except ContainerNotFound:
            return True
        except RuntimeClientError as e:
            logger.error(f"Could not check container status: {e}")
            return False

        state = attrs.get("State") or {}
        return not state.get("Running", False) or state.get("Restarting", False)

    def get_container_ip(self, container_id: str) -> str:
        """Find an IP address the container can be reached on."""
        from dockwatch.address import resolve_container_address

        return resolve_container_address(self, container_id)

    def close(self) -> None:
        """Release the SDK client's connection pool."""
        with self._sdk_lock:
            if self._sdk is not None:
                self._sdk.close()
                self._sdk = None
