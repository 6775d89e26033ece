"""Dockwatch Agent - container event subscription and address lookup.

This agent runs next to a Docker daemon and handles:
- A resilient subscription to Docker's container events, forwarded to the
  controller (or just logged when no controller is configured)
- Resolving the address a container can be reached on
- Reporting whether a container is running
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException

from dockwatch.client import DockerClient
from dockwatch.config import settings
from dockwatch.errors import ContainerLookupError, NoAddressFound
from dockwatch.events import ContainerObserver, EventSubscriber
from dockwatch.logging_config import setup_logging
from dockwatch.observers import ControllerForwarder, LoggingObserver
from dockwatch.schemas import (
    ContainerAddressResponse,
    ContainerStateResponse,
    HealthResponse,
)
from dockwatch.version import __version__

# Generate agent ID if not configured
AGENT_ID = settings.agent_id or str(uuid.uuid4())[:8]

# Configure structured logging
setup_logging(AGENT_ID)
logger = logging.getLogger(__name__)

# Lazily initialized so importing the app never touches Docker
_docker_client: DockerClient | None = None
_event_subscriber: EventSubscriber | None = None


def get_docker_client() -> DockerClient:
    """Lazy-initialize the Docker client."""
    global _docker_client
    if _docker_client is None:
        _docker_client = DockerClient.from_settings(settings)
    return _docker_client


def get_event_subscriber() -> EventSubscriber:
    """Lazy-initialize the Docker event subscriber."""
    global _event_subscriber
    if _event_subscriber is None:
        _event_subscriber = EventSubscriber(
            get_docker_client(),
            initial_interval=settings.event_initial_interval,
            max_interval=settings.event_max_interval,
        )
    return _event_subscriber


def get_observer() -> ContainerObserver:
    """Pick where container events go."""
    if settings.controller_url:
        return ControllerForwarder(
            settings.controller_url,
            AGENT_ID,
            timeout=settings.forward_timeout,
        )
    return LoggingObserver()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - subscribe on startup, stop on shutdown."""
    logger.info(f"Dockwatch agent {AGENT_ID} starting...")
    logger.info(f"Docker endpoint: {settings.docker_host or 'environment'}")
    if settings.controller_url:
        logger.info(f"Forwarding container events to {settings.controller_url}")

    subscriber = get_event_subscriber()
    subscriber.subscribe(get_observer())
    logger.info("Docker event subscriber started")

    yield

    await subscriber.stop()
    get_docker_client().close()
    logger.info(f"Dockwatch agent {AGENT_ID} shutting down")


app = FastAPI(
    title="Dockwatch Agent",
    version=__version__,
    lifespan=lifespan,
)


# --- Health Endpoints ---

@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check, including the state of the Docker connection."""
    docker_info = await asyncio.to_thread(get_docker_client().info)
    return HealthResponse(
        agent_id=AGENT_ID,
        docker=docker_info,
        subscribed=get_event_subscriber().is_running(),
    )


# --- Container Endpoints ---

@app.get("/containers/{container_id}/address", response_model=ContainerAddressResponse)
async def container_address(container_id: str) -> ContainerAddressResponse:
    """Return the IP address a container can be reached on."""
    client = get_docker_client()
    try:
        address = await asyncio.to_thread(client.get_container_ip, container_id)
    except ContainerLookupError as e:
        if e.not_found:
            raise HTTPException(status_code=404, detail=str(e))
        raise HTTPException(status_code=502, detail=str(e))
    except NoAddressFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ContainerAddressResponse(container_id=container_id, address=address)


@app.get("/containers/{container_id}/not-running", response_model=ContainerStateResponse)
async def container_not_running(container_id: str) -> ContainerStateResponse:
    """Report whether Docker confirms a container is not running."""
    client = get_docker_client()
    not_running = await asyncio.to_thread(client.is_container_not_running, container_id)
    return ContainerStateResponse(container_id=container_id, not_running=not_running)


def run() -> None:
    """Run the agent with uvicorn."""
    import uvicorn

    uvicorn.run(
        "dockwatch.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )


# --- Entry point ---

if __name__ == "__main__":
    run()
