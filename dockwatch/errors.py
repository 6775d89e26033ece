"""Exceptions raised by the Docker client and the address resolver.

Two families matter here:

- RuntimeClientError: something went wrong talking to the Docker daemon.
  The event subscriber treats these as transient and retries.
- AddressResolutionError: a container's address could not be determined.
  These are raised to the caller and never retried.
"""
from __future__ import annotations


class RuntimeClientError(Exception):
    """Raised when a Docker API call fails."""


class ContainerNotFound(RuntimeClientError):
    """Raised when Docker has no container with the given name or ID."""

    def __init__(self, container_id: str):
        self.container_id = container_id
        super().__init__(f"No such container: {container_id}")


class AddressResolutionError(Exception):
    """Base class for address resolution failures."""

    def __init__(self, container_id: str, message: str):
        self.container_id = container_id
        super().__init__(message)


class ContainerLookupError(AddressResolutionError):
    """Raised when the container could not be inspected."""

    def __init__(self, container_id: str, reason: str, not_found: bool = False):
        self.not_found = not_found
        super().__init__(
            container_id,
            f"Lookup failed for container {container_id}: {reason}",
        )


class NoAddressFound(AddressResolutionError):
    """Raised when none of the address rules match."""

    def __init__(self, container_id: str):
        super().__init__(container_id, f"No IP address found for container {container_id}")
