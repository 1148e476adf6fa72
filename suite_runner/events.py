"""Notification stream for completed tests."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeAlias

from suite_runner.models.result import TestEvent

log = logging.getLogger(__name__)

TEST_EVENT = "test"
EVENT_NAMES = frozenset({TEST_EVENT})

TestEventHandler: TypeAlias = Callable[[TestEvent], object]


@dataclass(kw_only=True)
class EventEmitter:
    """Single-producer, multi-consumer channel of test notifications.

    Handlers are called synchronously, in subscription order, as soon as a
    test completes. A failing handler is logged and does not affect the run
    or the remaining handlers.
    """

    _handlers: dict[str, list[TestEventHandler]] = field(default_factory=dict)

    def on(self, event_name: str, handler: TestEventHandler) -> None:
        """Register a handler for an event name."""
        _check_event_name(event_name)
        handlers = self._handlers.setdefault(event_name, [])
        if handler not in handlers:
            handlers.append(handler)

    def off(self, event_name: str, handler: TestEventHandler) -> bool:
        """Remove a handler. Returns True if it was registered."""
        _check_event_name(event_name)
        handlers = self._handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def listener_count(self, event_name: str) -> int:
        return len(self._handlers.get(event_name, []))

    def emit(self, event_name: str, event: TestEvent) -> None:
        """Deliver an event to every handler registered for its name."""
        _check_event_name(event_name)
        for handler in list(self._handlers.get(event_name, [])):
            try:
                handler(event)
            except Exception:
                log.exception(
                    "Event handler %r failed for %s", handler, event.result.title
                )


def _check_event_name(event_name: str) -> None:
    if event_name not in EVENT_NAMES:
        raise ValueError(
            f"Unknown event '{event_name}'. Available events: {sorted(EVENT_NAMES)}"
        )
