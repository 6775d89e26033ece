"""Dockwatch HTTP API schemas.

These Pydantic models define the responses served by the agent.
"""

from pydantic import BaseModel

from dockwatch.version import __version__


class HealthResponse(BaseModel):
    """Agent liveness plus a description of the Docker connection."""
    status: str = "ok"
    agent_id: str
    version: str = __version__
    docker: str
    subscribed: bool = False  # True while an event subscription loop runs


class ContainerAddressResponse(BaseModel):
    """Address the container can be reached on."""
    container_id: str
    address: str


class ContainerStateResponse(BaseModel):
    """Whether Docker confirmed the container is not running.

    False means either "running" or "Docker could not be asked".
    """
    container_id: str
    not_running: bool
