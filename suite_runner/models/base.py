"""Base model configuration for declaration data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model; declarations never change once registered."""

    model_config = ConfigDict(frozen=True, extra="forbid")
