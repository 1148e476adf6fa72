"""Exceptions raised while registering and running declarations."""


class SuiteRunnerError(Exception):
    """Base class for all suite runner errors."""


class ValidationError(SuiteRunnerError, ValueError):
    """Raised when a declaration is rejected at registration time."""


class MissingTypeError(ValidationError):
    """Raised when a declaration does not carry a type."""

    def __init__(self) -> None:
        super().__init__("Test type must be specified")


class IllegalExclusiveHookError(ValidationError):
    """Raised when a hook declaration asks for exclusive execution."""

    def __init__(self, hook_type: str) -> None:
        super().__init__(f'"only" cannot be used with a {hook_type} test')
        self.hook_type = hook_type


class CollectionFrozenError(ValidationError):
    """Raised when adding to a collection that has already been built."""

    def __init__(self) -> None:
        super().__init__("Cannot add declarations after the collection is built")


class TestFailure(SuiteRunnerError):
    """Failure detail of a single hook or test execution.

    Recorded on the outcome, never raised out of a run. The originating
    exception, if any, is available as ``__cause__``.
    """

    __test__ = False

    def __init__(self, title: str, message: str) -> None:
        super().__init__(message)
        self.title = title
        self.message = message

    @classmethod
    def from_exception(cls, title: str, exc: BaseException) -> "TestFailure":
        """Wrap an exception raised (or reported) by a body."""
        if isinstance(exc, TestFailure):
            return exc
        failure = cls(title, str(exc) or type(exc).__name__)
        failure.__cause__ = exc
        return failure


class PlanError(SuiteRunnerError, RuntimeError):
    """Raised when an execution plan violates its structural invariants."""


class SchedulerStateError(SuiteRunnerError, RuntimeError):
    """Raised when a scheduler is driven outside of its state machine."""
