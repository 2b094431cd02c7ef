"""Observable value slot with callback and async-iterator consumers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Pushed to async consumers once the slot is closed
_CLOSED = object()


class Observable(Generic[T]):
    """Holds the latest value and notifies subscribers when it is replaced.

    Usage:
        slot = Observable()
        unsubscribe = slot.subscribe(lambda value: print(value))
        slot.set(42)
        slot.value  # 42
        unsubscribe()

    Values are replaced, never mutated in place, so readers always see
    either the previous or the next value in full.
    """

    def __init__(self, initial: T | None = None):
        self._value: T | None = initial
        self._version = 0
        self._subscribers: list[Callable[[T], None]] = []
        self._queues: set[asyncio.Queue] = set()
        self._closed = False

    @property
    def value(self) -> T | None:
        return self._value

    @property
    def version(self) -> int:
        """Number of times a value has been set."""
        return self._version

    def set(self, value: T) -> None:
        """Replace the value and notify every subscriber.

        After ``close()`` the value is still stored but nobody is notified.
        """
        self._value = value
        self._version += 1
        if self._closed:
            return

        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception("Observable subscriber %r failed", callback)

        for queue in list(self._queues):
            # Async consumers only care about the latest value
            self._replace(queue, value)

    @staticmethod
    def _replace(queue: asyncio.Queue, item: object) -> None:
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(item)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback for future values; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers) + len(self._queues)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """End every ``updates()`` iteration and drop callback subscribers."""
        if self._closed:
            return
        self._closed = True
        self._subscribers.clear()
        for queue in list(self._queues):
            self._replace(queue, _CLOSED)

    async def updates(self, include_current: bool = True) -> AsyncGenerator[T, None]:
        """Yield values as they are set, until the slot is closed.

        A slow consumer skips intermediate values and receives the latest one.
        """
        if self._closed:
            return
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        if include_current and self._value is not None:
            queue.put_nowait(self._value)
        self._queues.add(queue)
        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                yield item
        finally:
            self._queues.discard(queue)
