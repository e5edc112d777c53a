"""Observable event surface for the logger.

Two event kinds are emitted by a dispatch:

- `log`   -> (transport, level, message, metadata), once per settled transport.
- `error` -> (error, transport), once per failed transport when enabled.

Listeners are purely observational: a raising handler is logged and skipped,
never propagated back into the dispatch.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Literal

import structlog

EventName = Literal["log", "error"]
EVENT_NAMES: tuple[str, ...] = ("log", "error")

Handler = Callable[..., Any]

_log = structlog.get_logger(__name__)


class EventChannel:
    """Small synchronous event emitter with optional queue subscribers."""

    def __init__(self) -> None:
        # event -> [(handler, once)]
        self._handlers: dict[str, list[tuple[Handler, bool]]] = {name: [] for name in EVENT_NAMES}
        self._subscribers: dict[str, set[asyncio.Queue[tuple[Any, ...]]]] = {name: set() for name in EVENT_NAMES}

    def _check(self, event: str) -> None:
        if event not in self._handlers:
            raise ValueError(f"Unknown event {event!r}; expected one of {EVENT_NAMES}")

    def on(self, event: EventName, handler: Handler) -> None:
        """Call `handler(*args)` every time `event` is emitted."""
        self._check(event)
        self._handlers[event].append((handler, False))

    def once(self, event: EventName, handler: Handler) -> None:
        """Call `handler(*args)` the next time `event` is emitted, then detach."""
        self._check(event)
        self._handlers[event].append((handler, True))

    def off(self, event: EventName, handler: Handler) -> None:
        """Detach every registration of `handler` for `event` (no-op if absent)."""
        self._check(event)
        self._handlers[event] = [(h, once) for h, once in self._handlers[event] if h is not handler]

    def listener_count(self, event: EventName) -> int:
        self._check(event)
        return len(self._handlers[event]) + len(self._subscribers[event])

    def subscribe(self, event: EventName) -> asyncio.Queue[tuple[Any, ...]]:
        """Create a queue that receives the argument tuple of each emitted `event`."""
        self._check(event)
        q: asyncio.Queue[tuple[Any, ...]] = asyncio.Queue()
        self._subscribers[event].add(q)
        return q

    def unsubscribe(self, event: EventName, q: asyncio.Queue[tuple[Any, ...]]) -> None:
        """Remove a subscriber queue (no further events will be delivered)."""
        self._check(event)
        self._subscribers[event].discard(q)

    def emit(self, event: EventName, *args: Any) -> bool:
        """Deliver `args` to all listeners of `event`; return whether any existed."""
        self._check(event)
        registered = self._handlers[event]
        if not registered and not self._subscribers[event]:
            return False

        self._handlers[event] = [(h, once) for h, once in registered if not once]
        for handler, _ in registered:
            try:
                handler(*args)
            except Exception:  # noqa: BLE001 - listeners must not affect dispatch
                _log.exception("event_handler_failed", event=event, handler=repr(handler))

        for q in list(self._subscribers[event]):
            q.put_nowait(args)
        return True
