"""Configuration for the test scheduler."""

from typing import Literal

from pydantic import BaseModel, PositiveInt


class RunnerConfig(BaseModel):
    """Configuration for a scheduled run."""

    # When any test is exclusive, treat every non-exclusive test as skipped
    honor_exclusive: bool = True
    group_order: Literal["serial-first", "concurrent-first"] = "serial-first"
    # None means concurrent tests are not bounded
    max_concurrency: PositiveInt | None = None
