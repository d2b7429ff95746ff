"""Thread synchronization primitives shared by the producer, workers and aggregator."""

import threading
from collections import deque
from typing import Any, Callable, Deque, Iterator, List, Optional

from .errors import Cancelled, QueueClosed


class CancellationToken:
    """Broadcast, idempotent cancellation signal.

    Blocking primitives register a listener so that a cancel wakes them up
    instead of leaving them parked on a condition nobody will notify.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._listeners: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Fire the signal. Calls after the first one are no-ops."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            listeners = list(self._listeners)
        # Listeners take their own locks, so run them outside ours
        for listener in listeners:
            listener()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback for cancel(). Runs immediately if already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._listeners.append(listener)
                return
        listener()


class AtomicCounter:
    """Integer counter that is safe to increment and read from any thread."""

    def __init__(self, initial: int = 0):
        self._lock = threading.Lock()
        self._value = initial

    def increment(self, amount: int = 1) -> int:
        """Add amount and return the new value."""
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class ClosableQueue:
    """Bounded FIFO with an explicit closed state.

    A closed queue still hands out the items it holds; get() raises
    QueueClosed only once it is both closed and empty. When bound to a
    CancellationToken, blocked put()/get() calls return as soon as the
    token fires, and cancellation wins over an item that is ready at the
    same moment.
    """

    def __init__(self, maxsize: int = 0, cancel: Optional[CancellationToken] = None):
        self.maxsize = maxsize
        self._items: Deque[Any] = deque()
        self._closed = False
        self._cond = threading.Condition()
        self._cancel = cancel
        if cancel is not None:
            cancel.add_listener(self._wake_all)

    def _wake_all(self) -> None:
        with self._cond:
            self._cond.notify_all()

    def _is_cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.cancelled

    def _has_room(self) -> bool:
        return self.maxsize <= 0 or len(self._items) < self.maxsize

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def put(self, item: Any) -> bool:
        """Append item, blocking while the queue is full.

        Returns:
            True once the item is enqueued, False if cancellation fired first.

        Raises:
            QueueClosed: if the queue was closed before the item went in.
        """
        with self._cond:
            while True:
                if self._closed:
                    raise QueueClosed('put() on a closed queue')
                if self._is_cancelled():
                    return False
                if self._has_room():
                    break
                self._cond.wait()
            self._items.append(item)
            self._cond.notify_all()
            return True

    def get(self) -> Any:
        """Remove and return the oldest item, blocking while the queue is empty.

        Raises:
            Cancelled: if the bound cancellation token has fired.
            QueueClosed: if the queue is closed and drained.
        """
        with self._cond:
            while True:
                if self._is_cancelled():
                    raise Cancelled()
                if self._items:
                    item = self._items.popleft()
                    self._cond.notify_all()
                    return item
                if self._closed:
                    raise QueueClosed()
                self._cond.wait()

    def close(self) -> None:
        """Mark the queue closed: no more puts, getters drain what is left."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[Any]:
        while True:
            try:
                yield self.get()
            except QueueClosed:
                return
