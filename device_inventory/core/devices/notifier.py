"""
Change Notifier - synchronous publish/subscribe channels.

Each channel delivers every payload to its listeners in subscription
order, synchronously, exactly once. ``subscribe`` returns a
Subscription whose ``dispose()`` removes the listener again::

    with inventory.on_available_changed.subscribe(render):
        backend.attach(device)

A listener that raises is logged and skipped; the remaining listeners
still receive the payload.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, Iterable, TypeVar

from device_inventory.core.logging_utils import get_module_logger

logger = get_module_logger("ChangeNotifier")

T = TypeVar("T")

Listener = Callable[[T], None]


class Subscription:
    """Deregistration handle returned by ``Channel.subscribe`` and backends."""

    def __init__(self, dispose: Callable[[], None] | None = None):
        self._dispose = dispose
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        if self._dispose is not None:
            self._dispose()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()


class SubscriptionCollection:
    """Disposes a group of subscriptions together."""

    def __init__(self, subscriptions: Iterable[Subscription] = ()):
        self._subscriptions: list[Subscription] = list(subscriptions)

    def push(self, subscription: Subscription) -> Subscription:
        self._subscriptions.append(subscription)
        return subscription

    def __len__(self) -> int:
        return len(self._subscriptions)

    def dispose(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in reversed(subscriptions):
            subscription.dispose()


class Channel(Generic[T]):
    """A named notification channel."""

    def __init__(self, name: str):
        self.name = name
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Subscription:
        with self._lock:
            # Copy-on-write so a fire in progress keeps its own listener list
            self._listeners = [*self._listeners, listener]
        return Subscription(lambda: self._unsubscribe(listener))

    def _unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            listeners = list(self._listeners)
            if listener in listeners:
                listeners.remove(listener)
            self._listeners = listeners

    def fire(self, payload: T) -> None:
        for listener in self._listeners:
            try:
                listener(payload)
            except Exception as e:
                logger.error("Error in %s listener %r: %s", self.name, listener, e, exc_info=True)


__all__ = ["Channel", "Listener", "Subscription", "SubscriptionCollection"]
