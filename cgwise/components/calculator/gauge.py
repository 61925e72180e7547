"""
Gauge placement for a calculation result.

Maps a result value and its scale annotation onto normalized [0, 1]
positions so a client can draw a bar with the optimal band highlighted.
"""

from __future__ import annotations

from dataclasses import dataclass

from .schema import CalculationResult, ScaleAnnotation


@dataclass(frozen=True)
class GaugePosition:
    position: float
    optimal_start: float
    optimal_end: float


def _clamp(x: float) -> float:
    return max(0.0, min(1.0, x))


def _normalize(x: float, scale: ScaleAnnotation) -> float:
    span = scale.max - scale.min
    if span == 0:
        return 0.0
    return _clamp((x - scale.min) / span)


def gauge_position(result: CalculationResult) -> GaugePosition | None:
    """None when there is no value to place or no scale to place it on."""
    if result.value is None or result.scale is None:
        return None

    scale = result.scale
    return GaugePosition(
        position=_normalize(result.value, scale),
        optimal_start=_normalize(scale.optimal.min, scale),
        optimal_end=_normalize(scale.optimal.max, scale),
    )


def is_optimal(result: CalculationResult) -> bool | None:
    if result.value is None or result.scale is None:
        return None
    optimal = result.scale.optimal
    return optimal.min <= result.value <= optimal.max
