"""
Observable latest-value holder.

A ``LiveValue`` keeps the most recent value of a piece of shared state and
pushes every write to its observers. Async readers iterate ``stream()``, which
replays the current value first and then yields each later write in order;
synchronous observers register a callback with ``subscribe()``. Writes replace
the whole value (last write wins).
"""

import asyncio
from typing import AsyncIterator, Callable, Generic, List, Set, TypeVar

from loguru import logger

T = TypeVar("T")


class LiveValue(Generic[T]):
    """Latest value plus the readers currently watching it."""

    def __init__(self, initial: T):
        self._value = initial
        self._queues: Set[asyncio.Queue] = set()
        self._callbacks: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        """Current value."""
        return self._value

    @property
    def subscriber_count(self) -> int:
        """Number of attached async streams and callbacks."""
        return len(self._queues) + len(self._callbacks)

    def set(self, value: T) -> None:
        """Replace the value and notify every observer."""
        self._value = value
        for queue in list(self._queues):
            queue.put_nowait(value)
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception:
                logger.exception("LiveValue observer raised; continuing with remaining observers")

    def update(self, transform: Callable[[T], T]) -> T:
        """Apply ``transform`` to the current value and publish the result."""
        new_value = transform(self._value)
        if new_value is not self._value:
            self.set(new_value)
        return new_value

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """
        Register a synchronous observer.

        The callback is invoked immediately with the current value and then on
        every write. Returns a function that detaches the callback.
        """
        self._callbacks.append(callback)
        callback(self._value)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    async def stream(self) -> AsyncIterator[T]:
        """Yield the current value, then every subsequent write."""
        queue: asyncio.Queue = asyncio.Queue()
        self._queues.add(queue)
        try:
            yield self._value
            while True:
                yield await queue.get()
        finally:
            self._queues.discard(queue)
