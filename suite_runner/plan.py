"""Immutable execution plan produced by a test collection."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from suite_runner.errors import PlanError
from suite_runner.models.declaration import Declaration


@dataclass(frozen=True, kw_only=True)
class ExecutionPlan:
    """Ordered snapshot of hooks and tests handed to the scheduler."""

    before: tuple[Declaration, ...] = ()
    before_each: tuple[Declaration, ...] = ()
    after: tuple[Declaration, ...] = ()
    after_each: tuple[Declaration, ...] = ()
    concurrent: tuple[Declaration, ...] = ()
    serial: tuple[Declaration, ...] = ()
    has_exclusive: bool = False

    def buckets(self) -> dict[str, tuple[Declaration, ...]]:
        """Map each declaration type to the buckets that may hold it."""
        return {
            "before": self.before,
            "beforeEach": self.before_each,
            "after": self.after,
            "afterEach": self.after_each,
            "test": self.serial + self.concurrent,
        }

    def validate(self) -> None:
        """Check that every bucket only holds declarations of its own type.

        Raises:
            PlanError: If a declaration sits in the wrong bucket, or if the
                exclusive flag disagrees with the tests it summarizes.

        """
        serial_ids = {id(declaration) for declaration in self.serial}
        for expected, declarations in self.buckets().items():
            for declaration in declarations:
                if declaration.type != expected:
                    raise PlanError(
                        f"Declaration '{declaration.title}' of type "
                        f"{declaration.type!r} found in {expected!r} bucket"
                    )
                if declaration.type == "test" and (
                    declaration.metadata.serial != (id(declaration) in serial_ids)
                ):
                    raise PlanError(
                        f"Test '{declaration.title}' is in the wrong test group"
                    )

        exclusive = any(d.metadata.exclusive for d in self.concurrent + self.serial)
        if exclusive and not self.has_exclusive:
            raise PlanError("Plan holds exclusive tests but has_exclusive is unset")

    def summary(self) -> dict[str, Any]:
        """Return bucket titles, omitting empty buckets and groups."""
        serialized = {
            "tests": {
                "concurrent": _titles(self.concurrent),
                "serial": _titles(self.serial),
            },
            "hooks": {
                "before": _titles(self.before),
                "beforeEach": _titles(self.before_each),
                "after": _titles(self.after),
                "afterEach": _titles(self.after_each),
            },
        }
        return {
            group: {name: titles for name, titles in buckets.items() if titles}
            for group, buckets in serialized.items()
            if any(buckets.values())
        }


def _titles(declarations: Sequence[Declaration]) -> list[str]:
    return [declaration.title for declaration in declarations]
