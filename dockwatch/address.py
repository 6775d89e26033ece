"""Container address resolution.

Finds an IP address we can reach a container on:

- on Docker's default bridge network, the bridge-assigned address;
- on the host network, localhost;
- on daemons too old to report per-network settings, the legacy
  top-level ``NetworkSettings.IPAddress``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from dockwatch.errors import (
    ContainerLookupError,
    ContainerNotFound,
    NoAddressFound,
    RuntimeClientError,
)

if TYPE_CHECKING:
    from dockwatch.client import DockerClient

logger = logging.getLogger(__name__)

LOOPBACK_ADDRESS = "127.0.0.1"
BRIDGE_NETWORK = "bridge"
HOST_NETWORK = "host"


@dataclass(frozen=True)
class ContainerNetworkInfo:
    """Network details taken from one container inspect.

    Attributes:
        networks: Network name -> IP address on that network, or None when
            Docker reported no per-network settings at all
        ip_address: Legacy top-level IP address ("" if unset)
        network_mode: HostConfig.NetworkMode ("bridge", "host", ...)
    """

    networks: dict[str, str] | None
    ip_address: str = ""
    network_mode: str = ""

    @classmethod
    def from_inspect(cls, attrs: dict[str, Any]) -> ContainerNetworkInfo:
        """Build from a container's inspect document."""
        network_settings = attrs.get("NetworkSettings") or {}
        host_config = attrs.get("HostConfig") or {}

        raw_networks = network_settings.get("Networks")
        networks = None
        if raw_networks is not None:
            networks = {
                name: (net_info or {}).get("IPAddress") or ""
                for name, net_info in raw_networks.items()
            }

        return cls(
            networks=networks,
            ip_address=network_settings.get("IPAddress") or "",
            network_mode=host_config.get("NetworkMode") or "",
        )


def address_from_network_info(info: ContainerNetworkInfo, container_id: str) -> str:
    """Pick the address to reach a container on. First match wins.

    A bridge entry is returned as-is, even when its address is empty.

    Raises:
        NoAddressFound: If no rule yields an address
    """
    if info.networks is not None:
        if BRIDGE_NETWORK in info.networks:
            return info.networks[BRIDGE_NETWORK]
        if HOST_NETWORK in info.networks:
            return LOOPBACK_ADDRESS
    elif info.network_mode == HOST_NETWORK:
        return LOOPBACK_ADDRESS

    if info.ip_address:
        return info.ip_address

    raise NoAddressFound(container_id)


def resolve_container_address(client: DockerClient, container_id: str) -> str:
    """Inspect a container once and resolve its reachable address.

    Raises:
        ContainerLookupError: If the container could not be inspected
        NoAddressFound: If the container has no usable address
    """
    logger.debug(f"Getting IP for container {container_id}")
    try:
        attrs = client.inspect_container(container_id)
    except ContainerNotFound as e:
        raise ContainerLookupError(container_id, str(e), not_found=True) from e
    except RuntimeClientError as e:
        raise ContainerLookupError(container_id, str(e)) from e

    info = ContainerNetworkInfo.from_inspect(attrs)
    logger.debug(f"Networks for {container_id}: {info.networks}")
    return address_from_network_info(info, container_id)
