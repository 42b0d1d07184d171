"""
Observable state primitives.

- StateValue: a current value with change subscribers
- LiveQuery: a query result that refreshes whenever its tables change
- EventStream: one-shot events delivered to current subscribers
"""

import logging
import threading
from typing import Callable, Generic, Iterable, TypeVar

from .database import Database

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by subscribe(); cancel() detaches the callback."""

    def __init__(self, on_cancel: Callable[[], None]):
        self._on_cancel = on_cancel
        self._cancelled = False
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
        self._on_cancel()


class _Subscribers(Generic[T]):
    """Thread-safe callback list shared by the primitives below."""

    def __init__(self):
        self._callbacks: list[Callable[[T], None]] = []
        self._lock = threading.Lock()

    def add(self, callback: Callable[[T], None]) -> Subscription:
        with self._lock:
            self._callbacks.append(callback)

        def remove():
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return Subscription(remove)

    def __len__(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def deliver(self, value: T):
        with self._lock:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber callback failed")


class StateValue(Generic[T]):
    """Holds a value and notifies subscribers whenever it changes."""

    def __init__(self, initial: T):
        self._value = initial
        self._lock = threading.Lock()
        self._subscribers: _Subscribers[T] = _Subscribers()

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T):
        self.set(new_value)

    def set(self, new_value: T) -> bool:
        """Update the value. Returns False (and notifies nobody) if it did not change."""
        with self._lock:
            if new_value == self._value:
                return False
            self._value = new_value
        self._subscribers.deliver(new_value)
        return True

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        """Subscribe and immediately receive the current value."""
        subscription = self._subscribers.add(callback)
        callback(self._value)
        return subscription


class LiveQuery(Generic[T]):
    """
    Query result kept fresh from database change notifications.

    The query runs when the first subscriber attaches and again after every
    write to one of the watched tables, for as long as anyone is subscribed.
    """

    def __init__(self, db: Database, tables: Iterable[str], query: Callable[[], T]):
        self._db = db
        self._tables = frozenset(tables)
        self._query = query
        self._subscribers: _Subscribers[T] = _Subscribers()
        self._lock = threading.Lock()
        self._attached = False
        self._value: T | None = None

    @property
    def value(self) -> T | None:
        """Latest result delivered (None before the first subscription)."""
        return self._value

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        inner = self._subscribers.add(callback)
        with self._lock:
            if not self._attached:
                self._db.add_listener(self._on_change)
                self._attached = True
        self._refresh(only=callback)

        def cancel():
            inner.cancel()
            with self._lock:
                if self._attached and len(self._subscribers) == 0:
                    self._db.remove_listener(self._on_change)
                    self._attached = False

        return Subscription(cancel)

    def _on_change(self, tables: frozenset[str]):
        if tables & self._tables:
            self._refresh()

    def _refresh(self, only: Callable[[T], None] | None = None):
        result = self._query()
        self._value = result
        if only is not None:
            only(result)
        else:
            self._subscribers.deliver(result)


class EventStream(Generic[T]):
    """Fire-and-forget events; subscribers only see events emitted after subscribing."""

    def __init__(self):
        self._subscribers: _Subscribers[T] = _Subscribers()

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        return self._subscribers.add(callback)

    def emit(self, event: T):
        self._subscribers.deliver(event)
