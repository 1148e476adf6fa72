"""Scheduler that executes an execution plan."""

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from suite_runner.config import RunnerConfig
from suite_runner.errors import SchedulerStateError
from suite_runner.events import TEST_EVENT, EventEmitter, TestEventHandler
from suite_runner.executor import execute
from suite_runner.models.declaration import Declaration
from suite_runner.models.result import Outcome, RunResult, TestEvent
from suite_runner.plan import ExecutionPlan

log = logging.getLogger(__name__)


class SchedulerState(StrEnum):
    """Phases of a run, entered strictly in declaration order."""

    IDLE = "idle"
    BEFORE = "before"
    TESTS = "tests"
    AFTER = "after"
    COMPLETED = "completed"


@dataclass(kw_only=True)
class TestScheduler:
    """Runs the hooks and tests of a plan and aggregates their outcomes.

    ``before`` hooks run once, sequentially. Each test is then bracketed by
    its own ``beforeEach`` and ``afterEach`` sequences. Serial tests run one
    at a time; concurrent tests are started together. ``after`` hooks run
    once all tests have finished. Failures never interrupt the run.
    """

    __test__ = False

    plan: ExecutionPlan
    events: EventEmitter = field(default_factory=EventEmitter)
    config: RunnerConfig = field(default_factory=RunnerConfig)
    state: SchedulerState = field(default=SchedulerState.IDLE, init=False)
    _outcomes: list[Outcome] = field(default_factory=list, init=False, repr=False)

    def on(self, event_name: str, handler: TestEventHandler) -> None:
        """Subscribe to test notifications. Must be called before ``run``."""
        self.events.on(event_name, handler)

    def run_sync(self) -> RunResult:
        """Run the plan from synchronous code."""
        return asyncio.run(self.run())

    async def run(self) -> RunResult:
        """Execute every phase of the plan and return the aggregate verdict.

        Raises:
            SchedulerStateError: If this scheduler has already run
            PlanError: If the plan is structurally invalid

        """
        if self.state is not SchedulerState.IDLE:
            raise SchedulerStateError(f"Cannot run scheduler in state: {self.state}")
        self.plan.validate()

        log.info(
            "Running %d test(s) (%d serial, %d concurrent)",
            len(self.plan.serial) + len(self.plan.concurrent),
            len(self.plan.serial),
            len(self.plan.concurrent),
        )

        self._enter(SchedulerState.BEFORE)
        await self._run_hooks(self.plan.before)

        self._enter(SchedulerState.TESTS)
        if self.config.group_order == "serial-first":
            await self._run_serial()
            await self._run_concurrent()
        else:
            await self._run_concurrent()
            await self._run_serial()

        self._enter(SchedulerState.AFTER)
        await self._run_hooks(self.plan.after)

        self._enter(SchedulerState.COMPLETED)
        result = RunResult.from_outcomes(self._outcomes)
        log.info(
            "Run completed: passed=%s tests=%d failed=%d skipped=%d",
            result.passed,
            len(result.tests),
            result.failed_count,
            result.skipped_count,
        )
        return result

    def _enter(self, state: SchedulerState) -> None:
        log.debug("Scheduler %s -> %s", self.state, state)
        self.state = state

    async def _run_hooks(
        self, hooks: Sequence[Declaration], test: Declaration | None = None
    ) -> None:
        for hook in hooks:
            title = hook.title if test is None else f"{hook.title} for {test.title}"
            self._outcomes.append(await execute(hook, title))

    async def _run_serial(self) -> None:
        for test in self.plan.serial:
            await self._run_test(test)

    async def _run_concurrent(self) -> None:
        if not self.plan.concurrent:
            return

        limit = self.config.max_concurrency
        semaphore = asyncio.Semaphore(limit) if limit is not None else None

        async def bounded(test: Declaration) -> None:
            guard = semaphore if semaphore is not None else contextlib.nullcontext()
            async with guard:
                await self._run_test(test)

        await asyncio.gather(*(bounded(test) for test in self.plan.concurrent))

    async def _run_test(self, test: Declaration) -> None:
        """Run a test bracketed by its per-test hooks and publish its outcome."""
        if self._excluded(test):
            outcome = Outcome(title=test.title, kind="test", passed=True, skipped=True)
        elif test.metadata.skipped:
            outcome = await execute(test)
        else:
            await self._run_hooks(self.plan.before_each, test)
            outcome = await execute(test)
            await self._run_hooks(self.plan.after_each, test)

        self._outcomes.append(outcome)
        self.events.emit(TEST_EVENT, TestEvent(passed=outcome.passed, result=outcome))

    def _excluded(self, test: Declaration) -> bool:
        return (
            self.config.honor_exclusive
            and self.plan.has_exclusive
            and not test.metadata.exclusive
        )
