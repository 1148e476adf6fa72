"""Collection of declared tests and hooks."""

import logging

from suite_runner.config import RunnerConfig
from suite_runner.errors import (
    CollectionFrozenError,
    IllegalExclusiveHookError,
    MissingTypeError,
)
from suite_runner.events import EventEmitter, TestEventHandler
from suite_runner.models.declaration import Declaration
from suite_runner.plan import ExecutionPlan
from suite_runner.runner import TestScheduler

log = logging.getLogger(__name__)

# Declaration type -> bucket name. Tests are further split by metadata.serial.
_HOOK_BUCKETS = {
    "before": "before",
    "beforeEach": "before_each",
    "after": "after",
    "afterEach": "after_each",
}


class TestCollection:
    """Registry of declarations for one test file.

    Declarations are classified into hook buckets and test buckets in
    registration order. The collection is frozen once ``build`` is called.
    """

    __test__ = False

    def __init__(self) -> None:
        self._buckets: dict[str, list[Declaration]] = {
            "before": [],
            "before_each": [],
            "after": [],
            "after_each": [],
            "concurrent": [],
            "serial": [],
        }
        self._has_exclusive = False
        self._frozen = False
        self._events = EventEmitter()

    @property
    def has_exclusive(self) -> bool:
        """True once any declaration with ``exclusive`` has been added."""
        return self._has_exclusive

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add(self, declaration: Declaration) -> None:
        """Register a declaration.

        Raises:
            CollectionFrozenError: If the collection has already been built
            MissingTypeError: If the declaration has no type
            IllegalExclusiveHookError: If a hook is marked exclusive

        """
        if self._frozen:
            raise CollectionFrozenError()

        metadata = declaration.metadata
        if metadata.type is None:
            raise MissingTypeError()

        if metadata.is_hook:
            if metadata.exclusive:
                raise IllegalExclusiveHookError(metadata.type)
            bucket = _HOOK_BUCKETS[metadata.type]
        else:
            bucket = "serial" if metadata.serial else "concurrent"

        self._buckets[bucket].append(declaration)
        self._has_exclusive = self._has_exclusive or metadata.exclusive
        log.debug("Registered %s '%s' in %s", metadata.type, declaration.title, bucket)

    def on(self, event_name: str, handler: TestEventHandler) -> None:
        """Subscribe to notifications published while running."""
        self._events.on(event_name, handler)

    def off(self, event_name: str, handler: TestEventHandler) -> bool:
        """Unsubscribe a handler previously passed to ``on``."""
        return self._events.off(event_name, handler)

    def snapshot(self) -> ExecutionPlan:
        """Project the current registrations into an immutable plan."""
        return ExecutionPlan(
            before=tuple(self._buckets["before"]),
            before_each=tuple(self._buckets["before_each"]),
            after=tuple(self._buckets["after"]),
            after_each=tuple(self._buckets["after_each"]),
            concurrent=tuple(self._buckets["concurrent"]),
            serial=tuple(self._buckets["serial"]),
            has_exclusive=self._has_exclusive,
        )

    def build(self, config: RunnerConfig | None = None) -> TestScheduler:
        """Freeze the collection and return a scheduler for its plan."""
        self._frozen = True
        plan = self.snapshot()
        log.debug(
            "Built plan: %d concurrent, %d serial test(s)",
            len(plan.concurrent),
            len(plan.serial),
        )
        return TestScheduler(
            plan=plan, events=self._events, config=config or RunnerConfig()
        )
