"""Uniform invocation of synchronous, asynchronous and callback bodies."""

import asyncio
import inspect
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from suite_runner.errors import TestFailure
from suite_runner.models.declaration import Declaration, DeclarationType
from suite_runner.models.result import Outcome

log = logging.getLogger(__name__)

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL,
)


@dataclass(kw_only=True)
class ExecutionContext:
    """Handle passed to a body while it runs.

    Callback-style bodies must call ``end`` exactly once, optionally with the
    error that made them fail.
    """

    title: str
    kind: DeclarationType
    _done: asyncio.Future[None] = field(
        default_factory=lambda: asyncio.get_running_loop().create_future()
    )

    @property
    def ended(self) -> bool:
        return self._done.done()

    def end(self, error: BaseException | None = None) -> None:
        """Signal completion of a callback-style body."""
        if self._done.done():
            raise RuntimeError(f"end() called more than once in '{self.title}'")
        if error is None:
            self._done.set_result(None)
        else:
            self._done.set_exception(error)

    async def wait(self) -> None:
        await self._done

    def settle(self) -> None:
        """Mark an error passed to ``end`` as retrieved."""
        if self._done.done() and not self._done.cancelled():
            self._done.exception()


async def execute(declaration: Declaration, title: str | None = None) -> Outcome:
    """Run one declaration body and record its outcome.

    Exceptions raised or reported by the body become failed outcomes. Only
    cancellation propagates.
    """
    metadata = declaration.metadata
    kind = metadata.type or "test"
    title = declaration.title if title is None else title

    if metadata.skipped:
        log.debug("Skipping %s '%s'", kind, title)
        return Outcome(title=title, kind=kind, passed=True, skipped=True)

    context = ExecutionContext(title=title, kind=kind)
    started = time.perf_counter()
    try:
        await _invoke(declaration.fn, context, callback=metadata.callback)
    except Exception as exc:
        context.settle()
        failure = TestFailure.from_exception(title, exc)
        log.debug("%s '%s' failed: %s", kind, title, failure)
        return Outcome(
            title=title,
            kind=kind,
            passed=False,
            failure=failure,
            duration=time.perf_counter() - started,
        )

    log.debug("%s '%s' passed", kind, title)
    return Outcome(
        title=title,
        kind=kind,
        passed=True,
        duration=time.perf_counter() - started,
    )


async def _invoke(
    fn: Callable[..., Any] | None,
    context: ExecutionContext,
    *,
    callback: bool,
) -> None:
    if fn is None:
        raise TestFailure(context.title, "Expected an implementation")

    accepts_context = _accepts_context(fn)
    if callback and not accepts_context:
        raise TestFailure(
            context.title,
            "Callback-style bodies must accept the execution context",
        )

    result = fn(context) if accepts_context else fn()

    if callback:
        if inspect.isawaitable(result):
            # Close the coroutine so it is not reported as never awaited
            if inspect.iscoroutine(result):
                result.close()
            raise TestFailure(
                context.title,
                "Callback-style bodies must not return an awaitable",
            )
        await context.wait()
    elif inspect.isawaitable(result):
        await result


def _accepts_context(fn: Callable[..., Any]) -> bool:
    """Check whether a body takes the execution context as an argument."""
    try:
        parameters = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return True
    return any(parameter.kind in _POSITIONAL for parameter in parameters)
