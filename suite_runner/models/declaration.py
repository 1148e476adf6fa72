"""Models for declarations submitted to a test collection."""

from collections.abc import Callable
from typing import Any, Literal

from pydantic import Field

from suite_runner.models.base import Model

DeclarationType = Literal["test", "before", "beforeEach", "after", "afterEach"]
HookType = Literal["before", "beforeEach", "after", "afterEach"]

HOOK_TYPES: frozenset[str] = frozenset({"before", "beforeEach", "after", "afterEach"})


class Metadata(Model):
    """Fixed-shape metadata bundle attached to every declaration."""

    type: DeclarationType | None = Field(
        default=None, description="Declaration type (required for registration)"
    )
    serial: bool = Field(default=False, description="Run in isolation from others")
    exclusive: bool = Field(default=False, description="Restrict the run to this test")
    skipped: bool = Field(default=False, description="Do not execute the body")
    callback: bool = Field(
        default=False, description="Body signals completion through context.end()"
    )

    @property
    def is_hook(self) -> bool:
        return self.type in HOOK_TYPES


class Declaration(Model):
    """A test or lifecycle hook awaiting registration."""

    title: str = Field(default="", description="Human-readable, non-unique title")
    metadata: Metadata = Field(default_factory=Metadata)
    fn: Callable[..., Any] | None = Field(
        default=None, description="Executable body invoked at run time"
    )

    @property
    def type(self) -> DeclarationType | None:
        return self.metadata.type
