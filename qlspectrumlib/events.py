from __future__ import annotations

import threading
from typing import Any, Callable

ANY_EVENT = "*"


class EventBus:
    """Thread-safe publish/subscribe bus for controller notifications.

    Handlers registered for :data:`ANY_EVENT` receive every event with the
    event type passed as the ``event`` keyword.  Handlers run on the thread
    that emits, which for the controller is always the interactive thread.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str,
                  handler: Callable[..., Any]) -> Callable[[], None]:
        """Register a handler.  Returns a callable that unsubscribes it."""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        return lambda: self.unsubscribe(event_type, handler)

    def unsubscribe(self, event_type: str, handler: Callable[..., Any]) -> None:
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def handler_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, []))

    def emit(self, event_type: str, **data: Any) -> None:
        """Fire the handlers for *event_type*, then the wildcard handlers."""
        with self._lock:
            handlers = list(self._handlers.get(event_type, []))
            wildcard = list(self._handlers.get(ANY_EVENT, []))
        for handler in handlers:
            handler(**data)
        for handler in wildcard:
            handler(event=event_type, **data)
