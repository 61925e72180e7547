"""
Declarative calculator schema: unit pairs, input fields, results and scales.
"""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

UnitSystem = Literal["metric", "imperial"]
UNIT_SYSTEMS: tuple[UnitSystem, ...] = ("metric", "imperial")


# --- Schema Types ---


class UnitPair(BaseModel):
    """Metric/imperial pair of display strings (units or placeholders)."""

    model_config = ConfigDict(frozen=True)

    metric: str = ""
    imperial: str = ""

    def for_system(self, unit_system: UnitSystem) -> str:
        return self.metric if unit_system == "metric" else self.imperial


class InputField(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    label: str
    tooltip: str = ""
    unit: UnitPair = Field(default_factory=UnitPair)
    placeholder: UnitPair = Field(default_factory=UnitPair)
    min: float | None = None
    max: float | None = None
    step: float | None = None
    default: float | None = None


class OptimalRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float
    max: float


class ScaleAnnotation(BaseModel):
    """Absolute range of a result and its optimal sub-range."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    optimal: OptimalRange


class SystemScales(BaseModel):
    """Scale annotation per unit system (either may be absent)."""

    model_config = ConfigDict(frozen=True)

    metric: ScaleAnnotation | None = None
    imperial: ScaleAnnotation | None = None

    @classmethod
    def same(cls, scale: ScaleAnnotation) -> SystemScales:
        return cls(metric=scale, imperial=scale)

    def for_system(self, unit_system: UnitSystem) -> ScaleAnnotation | None:
        return self.metric if unit_system == "metric" else self.imperial


class CalculationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str = ""
    value: float | None = None
    unit: UnitPair = Field(default_factory=UnitPair)
    scale: ScaleAnnotation | None = None

    @field_validator("value")
    @classmethod
    def _finite_or_none(cls, v: float | None) -> float | None:
        # Non-finite numbers never leave the calculator core
        if v is not None and not math.isfinite(v):
            return None
        return v

