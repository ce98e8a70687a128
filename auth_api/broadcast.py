"""
Multicast State Broadcast.

A small in-process publish/subscribe channel.  Every subscriber owns an
independent, unbounded queue, so a slow consumer never blocks the
publisher or other subscribers.  Values published before a subscriber
attaches are not replayed to it.

Usage::

    broadcast: StateBroadcast[Optional[User]] = StateBroadcast()
    with broadcast.subscribe() as sub:
        broadcast.publish(user)
        assert sub.get(timeout=1.0) == user

Thread Safety
-------------
``publish``, ``subscribe``, ``close`` and subscription cancellation all
serialise on one internal lock, so every subscriber receives values in
the same order they were published.
"""

from __future__ import annotations

import queue
import threading
import weakref
from typing import Generic, Iterator, Optional, TypeVar

from auth_api.exceptions import SessionChannelClosedError

T = TypeVar("T")

# End-of-stream marker; ``None`` is a legitimate published value.
_END_OF_STREAM = object()


class Subscription(Generic[T]):
    """One subscriber's cursor over a :class:`StateBroadcast`.

    Iterating a subscription blocks for each next value and stops once
    the broadcast is closed or the subscription is cancelled.
    """

    def __init__(self, owner: Optional["StateBroadcast[T]"]) -> None:
        self._owner: Optional[StateBroadcast[T]] = owner
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._terminated: bool = False
        self._exhausted: bool = False

    # -- Delivery (called by the owning broadcast) ---------------------------

    def _deliver(self, value: T) -> None:
        self._queue.put_nowait(value)

    def _terminate(self) -> None:
        if not self._terminated:
            self._terminated = True
            self._queue.put_nowait(_END_OF_STREAM)

    # -- Consumption ---------------------------------------------------------

    @property
    def closed(self) -> bool:
        """``True`` once no further values will be delivered."""
        return self._terminated

    def get(self, timeout: Optional[float] = None) -> T:
        """Return the next value, blocking up to *timeout* seconds.

        Raises:
            queue.Empty: No value arrived within *timeout*.
            SessionChannelClosedError: The stream has ended.
        """
        if self._exhausted:
            raise SessionChannelClosedError("Subscription has ended.")
        item = self._queue.get(timeout=timeout)
        if item is _END_OF_STREAM:
            self._exhausted = True
            raise SessionChannelClosedError("Subscription has ended.")
        return item  # type: ignore[return-value]

    def drain(self) -> list[T]:
        """Return every value queued so far without blocking."""
        values: list[T] = []
        while not self._exhausted:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is _END_OF_STREAM:
                self._exhausted = True
                break
            values.append(item)  # type: ignore[arg-type]
        return values

    def cancel(self) -> None:
        """Detach from the broadcast.  Already queued values stay readable."""
        if self._owner is not None:
            self._owner._unsubscribe(self)
            self._owner = None
        self._terminate()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except SessionChannelClosedError:
                return

    def __enter__(self) -> "Subscription[T]":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


class StateBroadcast(Generic[T]):
    """Fan-out channel delivering every published value to all live subscribers."""

    def __init__(self) -> None:
        self._lock: threading.Lock = threading.Lock()
        # Weak, so a subscription dropped without cancel() is collected
        # instead of buffering every later value.
        self._subscribers: "weakref.WeakSet[Subscription[T]]" = weakref.WeakSet()
        self._closed: bool = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscription[T]:
        """Attach a new subscriber.

        The broadcast holds subscriptions weakly: keep a reference for as
        long as values are wanted, and drop it (or call ``cancel()``) to
        stop receiving.  After :meth:`close` the returned subscription is
        already ended and yields nothing.
        """
        with self._lock:
            if self._closed:
                subscription: Subscription[T] = Subscription(None)
                subscription._terminate()
                return subscription
            subscription = Subscription(self)
            self._subscribers.add(subscription)
            return subscription

    def publish(self, value: T) -> bool:
        """Deliver *value* to every current subscriber.

        Returns ``False`` (and delivers nothing) once the broadcast is closed.
        """
        with self._lock:
            if self._closed:
                return False
            for subscription in self._subscribers:
                subscription._deliver(value)
            return True

    def close(self) -> bool:
        """End the stream for every subscriber.

        Idempotent.  Returns ``True`` only for the call that closed it.
        """
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            subscribers = list(self._subscribers)
            self._subscribers = weakref.WeakSet()
        for subscription in subscribers:
            subscription._terminate()
        return True

    def _unsubscribe(self, subscription: Subscription[T]) -> None:
        with self._lock:
            self._subscribers.discard(subscription)
