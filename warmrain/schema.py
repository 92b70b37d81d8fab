"""Configuration schema for the warm-rain collision code.

The pydantic models mirror the YAML configuration files read by
:func:`warmrain.config_utils.load_config`.  Example::

    grid:
      z_top: 1500.0
      length: 50.0
    collisions:
      mode: hall
      workers: 4
    efficiency:
      mode: hall
    numerics:
      dt: 1.0
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from . import constants
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class GridConfig(BaseModel):
    """Vertical grid; explicit ``levels`` take precedence over ``z_top``/``length``."""

    z_top: float = Field(1500.0, ge=0, description="Height of the model top [m]")
    length: float = Field(50.0, gt=0, description="Layer thickness of the uniform grid [m]")
    levels: Optional[List[float]] = Field(None, description="Explicit level heights [m], non-decreasing")

    @field_validator("levels")
    @classmethod
    def _check_levels(cls, value: Optional[List[float]]) -> Optional[List[float]]:
        if value is None:
            return value
        if any(b < a for a, b in zip(value, value[1:])):
            raise ConfigurationError("grid.levels must be non-decreasing")
        return value


class SedimentationConfig(BaseModel):
    large_drop_warn_radius: float = Field(
        constants.FALL_R_MAX,
        gt=0,
        description="Radius above which the fall-speed law is reported as extrapolated [m]",
    )


class EfficiencyConfig(BaseModel):
    """Collision-efficiency provider."""

    mode: Literal["hall", "constant"] = Field("hall", description="'hall' table or a 'constant' value")
    value: float = Field(1.0, ge=0.0, le=1.0, description="Efficiency used when mode='constant'")
    table_path: Optional[Path] = Field(None, description="CSV table replacing the built-in Hall table")

    @model_validator(mode="after")
    def _check_table_mode(self) -> "EfficiencyConfig":
        if self.table_path is not None and self.mode != "hall":
            raise ConfigurationError("efficiency.table_path requires efficiency.mode='hall'")
        return self


class CollisionConfig(BaseModel):
    mode: Literal["hall", "none"] = Field("hall", description="Collision scheme")
    workers: int = Field(1, ge=1, description="Threads used to process layers")
    use_numba: Optional[bool] = Field(None, description="Force the JIT path on/off; None follows the environment")


class NumericsConfig(BaseModel):
    dt: float = Field(1.0, gt=0, description="Timestep [s]")


class Config(BaseModel):
    """Root configuration."""

    grid: GridConfig = Field(default_factory=GridConfig)
    sedimentation: SedimentationConfig = Field(default_factory=SedimentationConfig)
    efficiency: EfficiencyConfig = Field(default_factory=EfficiencyConfig)
    collisions: CollisionConfig = Field(default_factory=CollisionConfig)
    numerics: NumericsConfig = Field(default_factory=NumericsConfig)


__all__ = [
    "GridConfig",
    "SedimentationConfig",
    "EfficiencyConfig",
    "CollisionConfig",
    "NumericsConfig",
    "Config",
]
