"""Bounded delivery channel between an event stream session and its consumer.

Single producer, single consumer, FIFO. When the buffer is full the producer
waits; nothing is dropped. Closing the channel lets the consumer drain what is
left and then stop.
"""

import asyncio
from typing import AsyncIterator, Generic, List, Optional, TypeVar

from .constants import DEFAULT_CHANNEL_CAPACITY

T = TypeVar("T")

_CLOSED = object()


class ChannelClosed(Exception):
    """Raised when sending on a closed channel."""


class DeliveryChannel(Generic[T]):
    """Bounded asyncio queue with an explicit end of stream."""

    def __init__(self, capacity: int = DEFAULT_CHANNEL_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Channel capacity must be positive: {capacity}")
        self.capacity = capacity
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)
        self._closed = False
        # Set once the close marker is enqueued
        self._marker_queued = asyncio.Event()
        self._marker_task: Optional[asyncio.Task] = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, item: T) -> None:
        """Enqueue an item, waiting while the channel is full.

        Raises:
            ChannelClosed: If the channel was closed
        """
        if self._closed:
            raise ChannelClosed()
        await self._queue.put(item)

    def close(self) -> None:
        """Close the channel. Items already sent are still delivered."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSED)
            self._marker_queued.set()
        except asyncio.QueueFull:
            # Consumer is behind; enqueue the marker once there is room
            self._marker_task = asyncio.get_running_loop().create_task(self._put_marker())

    async def _put_marker(self) -> None:
        await self._queue.put(_CLOSED)
        self._marker_queued.set()

    async def receive(self) -> T:
        """Wait for the next item.

        Raises:
            ChannelClosed: Once the channel is closed and drained
        """
        if self._closed and self._queue.empty() and self._marker_queued.is_set():
            raise ChannelClosed()
        item = await self._queue.get()
        if item is _CLOSED:
            raise ChannelClosed()
        return item

    def drain(self) -> List[T]:
        """Take every item currently buffered without waiting."""
        items = []
        while True:
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return items
            if item is _CLOSED:
                return items
            items.append(item)

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        while True:
            try:
                yield await self.receive()
            except ChannelClosed:
                return
