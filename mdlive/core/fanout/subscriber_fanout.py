"""Registry of live subscribers and broadcast of change notifications."""

import asyncio
import time
from collections.abc import AsyncIterator

from loguru import logger

from ..enumeration import BroadcastKind
from ..exceptions import PipelineClosedError
from ..schema import BroadcastEvent


async def iter_events(channel: asyncio.Queue) -> AsyncIterator[BroadcastEvent]:
    """Yield events from a subscriber channel until (and excluding) the exit event."""
    while True:
        event: BroadcastEvent = await channel.get()
        if event.kind == BroadcastKind.EXIT:
            return
        yield event


class SubscriberFanout:
    """Maps subscriber ids to their outbound channels.

    Delivery to each subscriber is a single non-blocking attempt on its own
    bounded queue, so a slow subscriber loses events for itself only and
    never holds up ``broadcast`` for the others. The transport that owns the
    physical connection is responsible for calling ``detach``.
    """

    def __init__(self, channel_size: int = 128):
        self.channel_size: int = channel_size
        self._channels: dict[int, asyncio.Queue] = {}
        self._lock = asyncio.Lock()
        self._last_id: int = 0
        self._closed: bool = False

    def _next_id(self) -> int:
        self._last_id = max(time.time_ns(), self._last_id + 1)
        return self._last_id

    @property
    def closed(self) -> bool:
        return self._closed

    async def attach(self) -> tuple[int, asyncio.Queue]:
        """Register a new subscriber and return its id and channel."""
        async with self._lock:
            if self._closed:
                raise PipelineClosedError("Subscriber registry is closed")

            subscriber_id = self._next_id()
            channel: asyncio.Queue = asyncio.Queue(maxsize=self.channel_size)
            self._channels[subscriber_id] = channel
            logger.debug(f"Attached subscriber {subscriber_id} ({len(self._channels)} open)")
            return subscriber_id, channel

    async def detach(self, subscriber_id: int) -> bool:
        """Remove a subscriber; returns False if it was already gone."""
        async with self._lock:
            removed = self._channels.pop(subscriber_id, None) is not None

        if removed:
            logger.debug(f"Detached subscriber {subscriber_id}")
        return removed

    async def count(self) -> int:
        async with self._lock:
            return len(self._channels)

    @staticmethod
    def _deliver(subscriber_id: int, channel: asyncio.Queue, event: BroadcastEvent) -> bool:
        try:
            channel.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(f"Subscriber {subscriber_id} is not keeping up, dropped {event.kind.value} event")
            return False
        return True

    async def broadcast(self, event: BroadcastEvent) -> int:
        """Deliver ``event`` to every registered subscriber; returns the number of successful deliveries."""
        async with self._lock:
            channels = list(self._channels.items())

        logger.debug(f"Broadcasting {event.kind.value} {event.path or ''} to {len(channels)} subscribers")
        return sum(self._deliver(subscriber_id, channel, event) for subscriber_id, channel in channels)

    async def close(self):
        """Send the exit event to every subscriber and tear the registry down."""
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            channels = list(self._channels.items())
            self._channels.clear()

        exit_event = BroadcastEvent.exit()
        for subscriber_id, channel in channels:
            if not self._deliver(subscriber_id, channel, exit_event):
                # the exit event must arrive; make room by dropping the oldest pending event
                channel.get_nowait()
                channel.put_nowait(exit_event)
        logger.debug(f"Closed subscriber registry ({len(channels)} notified)")
