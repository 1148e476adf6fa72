"""Models for execution outcomes and run results."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from suite_runner.errors import TestFailure
from suite_runner.models.declaration import DeclarationType


@dataclass(frozen=True, kw_only=True)
class Outcome:
    """Result of a single hook or test execution."""

    title: str
    kind: DeclarationType
    passed: bool
    skipped: bool = False
    failure: TestFailure | None = None
    duration: float = 0.0

    @property
    def is_test(self) -> bool:
        return self.kind == "test"


@dataclass(frozen=True, kw_only=True)
class TestEvent:
    """Notification published once per completed test."""

    __test__ = False

    passed: bool
    result: Outcome


@dataclass(frozen=True, kw_only=True)
class RunResult:
    """Aggregate verdict of a run.

    ``passed`` is true only when every hook and test outcome passed. Skipped
    outcomes count as passed.
    """

    passed: bool
    outcomes: Sequence[Outcome] = field(default_factory=tuple)

    @classmethod
    def from_outcomes(cls, outcomes: Sequence[Outcome]) -> "RunResult":
        return cls(
            passed=all(outcome.passed for outcome in outcomes),
            outcomes=tuple(outcomes),
        )

    @property
    def tests(self) -> Sequence[Outcome]:
        return [outcome for outcome in self.outcomes if outcome.is_test]

    @property
    def failures(self) -> Sequence[Outcome]:
        return [outcome for outcome in self.outcomes if not outcome.passed]

    @property
    def passed_count(self) -> int:
        return sum(1 for t in self.tests if t.passed and not t.skipped)

    @property
    def failed_count(self) -> int:
        return sum(1 for t in self.tests if not t.passed)

    @property
    def skipped_count(self) -> int:
        return sum(1 for t in self.tests if t.skipped)
