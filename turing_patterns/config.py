"""
Typed configuration for the reaction-diffusion diagram.

DiagramConfig is built once per session; StepParams is built fresh for
every iteration from whatever the parameter source returns. Both are
pydantic models so malformed input is rejected at the boundary and
re-raised as ConfigurationError.
"""

from typing import Any, Callable, Literal, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .presentation import threshold_colorize


class StepParams(BaseModel):
    """Per-iteration control parameters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    diffusion_rate: float = Field(ge=0.0, allow_inf_nan=False)
    diffusion_step: float = Field(ge=0.0, allow_inf_nan=False,
                                  description="Neighbour distance in grid cells")
    feed: float = Field(ge=0.0, allow_inf_nan=False)
    kill: float = Field(ge=0.0, allow_inf_nan=False)
    reset: bool = False


def coerce_step_params(value):
    """Accept a StepParams or a mapping with the same fields."""
    if isinstance(value, StepParams):
        return value
    try:
        return StepParams.model_validate(value)
    except ValidationError as e:
        raise ConfigurationError(f"invalid step parameters: {e}") from e


class DiagramConfig(BaseModel):
    """Construction parameters of a ReactionDiffusionDiagram.

    initial_bitmap receives a SeedSurface and draws the seed onto it.
    colorize maps (A, B) arrays to an (H, W, 3) float RGB array.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    size: int = Field(gt=0, description="Grid resolution (size x size)")
    iterations_per_tick: int = Field(default=20, gt=0)
    initial_bitmap: Callable[..., Any]
    colorize: Callable[..., Any] = threshold_colorize
    feed_mask: Optional[np.ndarray] = None
    backend: Literal["numpy", "torch"] = "numpy"
    device: Optional[str] = None

    @field_validator("feed_mask", mode="before")
    @classmethod
    def _mask_to_array(cls, value):
        if value is None:
            return None
        try:
            return np.asarray(value, dtype=np.float32).reshape(-1)
        except (TypeError, ValueError) as e:
            raise ValueError(f"feed_mask must be numeric: {e}") from e

    @classmethod
    def coerce(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls.model_validate(value)
        except ValidationError as e:
            raise ConfigurationError(f"invalid diagram configuration: {e}") from e
