"""Multi-subscriber, fire-and-forget broadcast channel for due reminders.

Each subscriber gets its own unbounded asyncio.Queue, so publish never waits on a
slow consumer. There is no replay: a subscriber only sees items published while it
is attached. With no subscribers a published item is simply dropped.
"""

from __future__ import annotations

import asyncio
from typing import Generic, List, TypeVar

from remindme.logger import logger

T = TypeVar("T")

_CLOSED = object()


class ChannelClosed(Exception):
    """Raised by Subscription.get() once the subscription is terminated and drained."""


class Subscription(Generic[T]):
    def __init__(self, channel: "BroadcastChannel[T]", name: str) -> None:
        self.name = name
        self._channel = channel
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self, item: T) -> None:
        self._queue.put_nowait(item)

    def _terminate(self) -> None:
        self._queue.put_nowait(_CLOSED)

    async def get(self) -> T:
        if self._closed and self._queue.empty():
            raise ChannelClosed(self.name)
        item = await self._queue.get()
        if item is _CLOSED:
            self._closed = True
            raise ChannelClosed(self.name)
        return item

    def drain(self) -> List[T]:
        """Return every item delivered so far without waiting."""
        items: List[T] = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is _CLOSED:
                self._closed = True
                break
            items.append(item)
        return items

    def unsubscribe(self) -> None:
        self._channel.unsubscribe(self)

    def __aiter__(self) -> "Subscription[T]":
        return self

    async def __anext__(self) -> T:
        try:
            return await self.get()
        except ChannelClosed:
            raise StopAsyncIteration


class BroadcastChannel(Generic[T]):
    def __init__(self, name: str = "broadcast") -> None:
        self.name = name
        self._subscribers: List[Subscription[T]] = []
        self._closed = False
        self._counter = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription[T]:
        self._counter += 1
        subscription: Subscription[T] = Subscription(self, f"{self.name}#{self._counter}")
        if self._closed:
            # late subscribers get an already-terminated handle
            subscription._terminate()
            return subscription
        self._subscribers.append(subscription)
        logger.trace(f"Channel {self.name}: {subscription.name} subscribed, subscribers={len(self._subscribers)}")
        return subscription

    def unsubscribe(self, subscription: Subscription[T]) -> None:
        if subscription not in self._subscribers:
            return
        self._subscribers.remove(subscription)
        subscription._terminate()
        logger.trace(f"Channel {self.name}: {subscription.name} unsubscribed, subscribers={len(self._subscribers)}")

    def publish(self, item: T) -> bool:
        """Deliver item to all current subscribers. Returns False once the channel is closed."""
        if self._closed:
            logger.debug(f"Channel {self.name} is closed, dropping published item")
            return False
        if not self._subscribers:
            logger.trace(f"Channel {self.name} has no subscribers, dropping published item")
            return True
        for subscription in list(self._subscribers):
            subscription._deliver(item)
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        subscribers, self._subscribers = self._subscribers, []
        for subscription in subscribers:
            subscription._terminate()
        logger.debug(f"Channel {self.name} closed, terminated {len(subscribers)} subscription(s)")


__all__ = ["BroadcastChannel", "Subscription", "ChannelClosed"]
