"""Reconnecting subscription to Docker's container event stream.

Docker's event stream is a single long-lived HTTP response, and it goes
away whenever the daemon restarts or the connection breaks. The
EventSubscriber keeps a subscription alive regardless: it opens the
stream, hands start/die events to an observer, and when the stream fails
to open or ends it waits and tries again with exponential backoff.

Backoff policy:
    - start at the initial interval (1s by default)
    - after every failed attempt or closed stream, sleep for the current
      interval and then multiply it by 1.5, capped at the max (20s)
    - a connection that stayed open longer than the interval in effect when
      it was opened resets the interval to the initial value
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable

from dockwatch.errors import RuntimeClientError
from dockwatch.events.base import ContainerEvent, ContainerEventStatus, ContainerObserver

if TYPE_CHECKING:
    from dockwatch.client import DockerClient, EventStream

logger = logging.getLogger(__name__)

INITIAL_INTERVAL = 1.0
MAX_INTERVAL = 20.0
BACKOFF_MULTIPLIER = 1.5

SleepFunc = Callable[[float], Awaitable[None]]
ClockFunc = Callable[[], float]


@dataclass
class ReconnectBackoff:
    """Reconnect delay state for one subscription loop.

    Attributes:
        initial_interval: Delay after a reset, and the starting delay
        max_interval: Upper bound for the delay
        interval: Current delay in seconds
        connected_at: Clock reading when the current stream was opened
    """

    initial_interval: float = INITIAL_INTERVAL
    max_interval: float = MAX_INTERVAL
    interval: float = field(init=False)
    connected_at: float | None = field(default=None, init=False)

    def __post_init__(self):
        self.interval = self.initial_interval

    def connected(self, now: float) -> None:
        self.connected_at = now

    def disconnected(self, now: float) -> None:
        """Reset the delay if the connection outlived it."""
        if self.connected_at is not None and now - self.connected_at > self.interval:
            self.interval = self.initial_interval
        self.connected_at = None

    def grow(self) -> None:
        self.interval = min(self.interval * BACKOFF_MULTIPLIER, self.max_interval)


class EventSubscriber:
    """Delivers Docker container start/die events to observers.

    Each subscribe() call starts its own background task with its own
    backoff state. Subscribing the same observer twice gets it every event
    twice. stop() cancels every task this subscriber started.
    """

    def __init__(
        self,
        client: DockerClient,
        initial_interval: float = INITIAL_INTERVAL,
        max_interval: float = MAX_INTERVAL,
        *,
        sleep: SleepFunc = asyncio.sleep,
        clock: ClockFunc = time.monotonic,
    ):
        self._client = client
        self._initial_interval = initial_interval
        self._max_interval = max_interval
        self._sleep = sleep
        self._clock = clock
        self._tasks: set[asyncio.Task] = set()

    def subscribe(self, observer: ContainerObserver) -> asyncio.Task:
        """Start delivering events to observer in the background.

        Must be called from a running event loop. Returns immediately;
        connection problems are retried, never raised.

        Returns:
            The background task. Cancelling it ends this subscription.
        """
        task = asyncio.get_running_loop().create_task(self._run(observer))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def is_running(self) -> bool:
        """Check if any subscription loop is still active."""
        return any(not task.done() for task in self._tasks)

    async def stop(self) -> None:
        """Cancel all subscription loops and wait for them to exit."""
        tasks = list(self._tasks)
        if not tasks:
            return
        logger.info(f"Stopping {len(tasks)} Docker event subscription(s)...")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, observer: ContainerObserver) -> None:
        backoff = ReconnectBackoff(self._initial_interval, self._max_interval)

        while True:
            try:
                stream = await asyncio.to_thread(self._client.open_event_stream)
            except RuntimeClientError as e:
                logger.error(
                    f"Unable to subscribe to Docker events: {e} - "
                    f"retrying in {backoff.interval:g}s"
                )
            except Exception as e:
                logger.exception(
                    f"Unexpected error subscribing to Docker events: {e} - "
                    f"retrying in {backoff.interval:g}s"
                )
            else:
                backoff.connected(self._clock())
                logger.info("Subscribed to Docker events")
                try:
                    await self._consume(stream, observer)
                finally:
                    stream.close()
                backoff.disconnected(self._clock())
                logger.error(
                    f"Docker event stream closed - retrying subscription in "
                    f"{backoff.interval:g}s"
                )

            await self._sleep(backoff.interval)
            backoff.grow()

    async def _consume(self, stream: EventStream, observer: ContainerObserver) -> None:
        async for event in stream:
            await self._dispatch(event, observer)

    async def _dispatch(self, event: ContainerEvent, observer: ContainerObserver) -> None:
        if event.status == ContainerEventStatus.OTHER:
            return

        logger.debug(f"Docker event: {event.action} for {event.container_id}")
        try:
            if event.status == ContainerEventStatus.STARTED:
                await observer.container_started(event.container_id)
            else:
                await observer.container_died(event.container_id)
        except Exception as e:
            logger.error(f"Error in container observer ({event.action} {event.container_id}): {e}")
