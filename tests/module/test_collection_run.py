"""End-to-end tests registering declarations and running the collection."""

from collections.abc import Callable
from typing import Any

import pytest

from suite_runner.config import RunnerConfig
from suite_runner.executor import ExecutionContext
from suite_runner.models.result import TestEvent
from suite_runner.registry import TestCollection
from suite_runner.testing.factories import make_declaration

EXPECTED_TRACE = [
    "before1",
    "before2",
    "beforeEach1 for test1",
    "beforeEach2 for test1",
    "test1",
    "afterEach1 for test1",
    "afterEach2 for test1",
    "beforeEach1 for test2",
    "beforeEach2 for test2",
    "test2",
    "afterEach1 for test2",
    "afterEach2 for test2",
    "after1",
    "after2",
]


def register_interleaved(
    collection: TestCollection, fn: Callable[..., Any]
) -> None:
    """Register hooks and tests in a deliberately interleaved order."""
    for title, opts in [
        ("after1", {"type": "after"}),
        ("beforeEach1", {"type": "beforeEach"}),
        ("before1", {"type": "before"}),
        ("beforeEach2", {"type": "beforeEach"}),
        ("afterEach1", {"type": "afterEach"}),
        ("test1", {}),
        ("afterEach2", {"type": "afterEach"}),
        ("test2", {}),
        ("after2", {"type": "after"}),
        ("before2", {"type": "before"}),
    ]:
        collection.add(make_declaration(title, fn, **opts))


def test_single_concurrent_test_plan() -> None:
    """A single default test produces a concurrent-only plan."""
    collection = TestCollection()
    collection.add(make_declaration("foo"))

    assert collection.build().plan.summary() == {"tests": {"concurrent": ["foo"]}}


def test_runs_hooks_and_tests_in_order() -> None:
    """Produces the exact execution trace for interleaved registrations."""
    collection = TestCollection()
    log: list[str] = []

    def logger(context: ExecutionContext) -> None:
        log.append(context.title)

    register_interleaved(collection, logger)

    result = collection.build().run_sync()

    assert result.passed is True
    assert log == EXPECTED_TRACE


async def test_runs_hooks_and_tests_in_order_async() -> None:
    """Produces the same trace when awaited from a running loop."""
    collection = TestCollection()
    log: list[str] = []

    async def logger(context: ExecutionContext) -> None:
        log.append(context.title)

    register_interleaved(collection, logger)

    result = await collection.build().run()

    assert result.passed is True
    assert log == EXPECTED_TRACE


def test_notifies_only_test_completions() -> None:
    """Subscribers receive one passing event per test and none for hooks."""
    collection = TestCollection()
    events: list[TestEvent] = []

    def noop() -> None:
        pass

    register_interleaved(collection, noop)
    collection.on("test", events.append)

    result = collection.build().run_sync()

    assert result.passed is True
    assert [event.result.title for event in events] == ["test1", "test2"]
    assert all(event.passed for event in events)


def test_mixed_collection_builds_equal_plans() -> None:
    """Building twice without further additions yields equal plans."""
    collection = TestCollection()
    collection.add(make_declaration("c1"))
    collection.add(make_declaration("s1", serial=True))
    collection.add(make_declaration("c2"))
    collection.add(make_declaration("s2", serial=True))

    first = collection.build().plan
    second = collection.build().plan

    assert first == second
    assert first.summary() == {
        "tests": {"concurrent": ["c1", "c2"], "serial": ["s1", "s2"]}
    }


def test_failing_test_is_reported_and_run_continues() -> None:
    """A failing test fails the run but every other entry still executes."""
    collection = TestCollection()
    log: list[str] = []
    events: list[TestEvent] = []

    def fail(context: ExecutionContext) -> None:
        log.append(context.title)
        raise AssertionError("expected failure")

    def record(context: ExecutionContext) -> None:
        log.append(context.title)

    collection.add(make_declaration("setup", record, type="before"))
    collection.add(make_declaration("bad", fail))
    collection.add(make_declaration("good", record))
    collection.add(make_declaration("teardown", record, type="after"))
    collection.on("test", events.append)

    result = collection.build().run_sync()

    assert result.passed is False
    assert log == ["setup", "bad", "good", "teardown"]
    assert [(e.result.title, e.passed) for e in events] == [
        ("bad", False),
        ("good", True),
    ]
    failure = events[0].result.failure
    assert failure is not None
    assert failure.message == "expected failure"


@pytest.mark.parametrize("honor_exclusive", [True, False])
def test_exclusive_toggle(honor_exclusive: bool) -> None:
    """Exclusive filtering is applied only when enabled."""
    collection = TestCollection()
    log: list[str] = []
    collection.add(make_declaration("regular", lambda t: log.append(t.title)))
    collection.add(
        make_declaration("only", lambda t: log.append(t.title), exclusive=True)
    )

    result = collection.build(RunnerConfig(honor_exclusive=honor_exclusive)).run_sync()

    assert result.passed is True
    assert log == (["only"] if honor_exclusive else ["regular", "only"])
