"""Synchronous event bus used to notify the host layer about style lifecycles."""

from __future__ import annotations

import threading
from typing import Any, Callable


class EventBus:
    """Thread-safe synchronous publish-subscribe event bus.

    Listeners can subscribe to specific event types or receive all events.
    Events are dispatched synchronously, in registration order, on the
    thread that emits them. Listeners run without the bus lock held, so a
    listener may subscribe or unsubscribe from inside a callback.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: dict[type, list[Callable[[Any], None]]] = {}
        self._global_listeners: list[Callable[[Any], None]] = []

    def subscribe(self, event_type: type, callback: Callable[[Any], None]) -> None:
        """Register a callback for a specific event type."""
        with self._lock:
            self._listeners.setdefault(event_type, []).append(callback)

    def on_all(self, callback: Callable[[Any], None]) -> None:
        """Register a callback that receives every event."""
        with self._lock:
            self._global_listeners.append(callback)

    def unsubscribe(self, callback: Callable[[Any], None]) -> None:
        """Remove *callback* from every subscription. No-op if not found."""
        with self._lock:
            self._global_listeners = [cb for cb in self._global_listeners if cb != callback]
            for event_type, callbacks in self._listeners.items():
                self._listeners[event_type] = [cb for cb in callbacks if cb != callback]

    def emit(self, event: Any) -> None:
        """Dispatch an event to all matching listeners."""
        with self._lock:
            callbacks = [*self._global_listeners, *self._listeners.get(type(event), [])]
        for cb in callbacks:
            cb(event)
