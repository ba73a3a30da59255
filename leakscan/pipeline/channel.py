"""Bounded queue with an explicit closed state.

``asyncio.Queue`` has no notion of "no more items". ``Channel`` adds one:
after ``close()`` no producer may put, and once the buffered items are
drained every consumer's ``get()`` raises ``ChannelClosed``. Consumers can
simply ``async for item in channel``.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Generic, TypeVar

T = TypeVar("T")

# Queued by close(); every consumer that dequeues it puts it straight back
# so the next consumer sees it too.
_CLOSED = object()


class ChannelClosed(Exception):
    """Put on a closed channel, or get on a closed and drained one."""


class Channel(Generic[T]):
    """FIFO channel with capacity-based backpressure.

    Args:
        capacity: Maximum buffered items; producers block when full.
                  Values below 1 are raised to 1 (a zero-size asyncio.Queue
                  would be unbounded).
        name:     Label used in error messages and logs.
    """

    def __init__(self, capacity: int, name: str = "channel") -> None:
        self.capacity = max(1, capacity)
        self.name = name
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=self.capacity)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def put(self, item: T) -> None:
        """Enqueue ``item``, waiting while the channel is full.

        Raises:
            ChannelClosed: If the channel has been closed.
        """
        if self._closed:
            raise ChannelClosed(f"put on closed {self.name}")
        await self._queue.put(item)

    async def get(self) -> T:
        """Dequeue the next item, waiting while the channel is empty.

        Raises:
            ChannelClosed: Once the channel is closed and every buffered
                           item has been consumed.
        """
        item = await self._queue.get()
        if item is _CLOSED:
            # One slot was just freed and producers are locked out.
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed(f"{self.name} closed")
        return item

    async def close(self) -> None:
        """Stop accepting items; consumers drain what is buffered, then stop.

        Idempotent. Waits for a free slot when the channel is full.
        """
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_CLOSED)

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        while True:
            try:
                item = await self.get()
            except ChannelClosed:
                return
            yield item
