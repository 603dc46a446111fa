"""Fan-out of change notifications to any number of viewers.

Each subscriber owns a bounded queue. Publishing never blocks: when a
subscriber falls behind and its queue is full the event is dropped for that
subscriber only and counted in ``Subscription.lagged``. Detaching is just
``close()``; no handshake with the publisher is needed.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")

_CLOSED = object()


class Subscription(Generic[T]):
    """Receiving end of a :class:`Broadcaster`."""

    def __init__(self, owner: Broadcaster[T], capacity: int) -> None:
        self._owner = owner
        self._queue: queue.Queue[object] = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()
        self.lagged = 0

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def _offer(self, event: T) -> None:
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            self.lagged += 1

    def get(self, timeout: float | None = None) -> T | None:
        """Wait for the next event; ``None`` on timeout or once closed."""

        if self.closed and self._queue.empty():
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            return None
        return item  # type: ignore[return-value]

    def close(self) -> None:
        if self.closed:
            return
        self._closed.set()
        self._owner._detach(self)
        # Wake a consumer blocked in get(); a full queue is already awake.
        try:
            self._queue.put_nowait(_CLOSED)
        except queue.Full:
            pass

    def __iter__(self) -> Iterator[T]:
        while True:
            item = self.get()
            if item is None:
                return
            yield item

    def __enter__(self) -> Subscription[T]:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class Broadcaster(Generic[T]):
    """Multi-subscriber channel; ``publish`` delivers to every live subscriber."""

    def __init__(self, capacity: int = 16) -> None:
        if capacity < 1:
            raise ValueError("capacity must be a positive integer")
        self._capacity = capacity
        self._subs: list[Subscription[T]] = []
        self._lock = threading.Lock()

    def subscribe(self) -> Subscription[T]:
        sub: Subscription[T] = Subscription(self, self._capacity)
        with self._lock:
            self._subs.append(sub)
        return sub

    def _detach(self, sub: Subscription[T]) -> None:
        with self._lock:
            if sub in self._subs:
                self._subs.remove(sub)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subs)

    def publish(self, event: T) -> int:
        """Offer ``event`` to all subscribers; return how many were attached."""

        with self._lock:
            subs = list(self._subs)
        for sub in subs:
            sub._offer(event)
        return len(subs)


__all__ = ["Broadcaster", "Subscription"]
