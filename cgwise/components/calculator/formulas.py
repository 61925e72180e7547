"""
Calculator formulas as a closed set of tagged variants.

Every variant carries a ``kind`` discriminator and typed parameters, so a
formula round-trips through JSON (catalog storage, admin API) without any
interpretation of free-form expressions. Each variant is a pure function of
its numeric inputs and the active unit system.

Shared rules for all variants:
- a required key that is missing or zero yields ``value=None``
- arithmetic failures (division by zero, sqrt of a negative, overflow) and
  non-finite results yield ``value=None``
- the scale annotation is only attached to a computed value
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from .schema import (
    CalculationResult,
    OptimalRange,
    ScaleAnnotation,
    SystemScales,
    UnitPair,
    UnitSystem,
)

# --- Conversion Constants ---

FEET_PER_METER = 3.28084
MM_PER_INCH = 25.4
LITERS_TO_GALLONS = 0.264


def fps_to_mps(fps: float) -> float:
    return fps / FEET_PER_METER


def mm_to_inch(mm: float) -> float:
    return mm / MM_PER_INCH


def inch_to_mm(inch: float) -> float:
    return inch * MM_PER_INCH


def _scale(lo: float, hi: float, opt_lo: float, opt_hi: float) -> ScaleAnnotation:
    return ScaleAnnotation(min=lo, max=hi, optimal=OptimalRange(min=opt_lo, max=opt_hi))


def _equivalent_diameter(ds: float, dw: float) -> float:
    """Equivalent wheel diameter; a flat workpiece (dw <= 0) uses ds."""
    return (ds * dw) / (ds + dw) if dw > 0 else ds


# --- Base ---


class _FormulaBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    unit: UnitPair
    scales: SystemScales = Field(default_factory=SystemScales)

    @field_validator("unit")
    @classmethod
    def _unit_populated(cls, v: UnitPair) -> UnitPair:
        if not v.metric or not v.imperial:
            raise ValueError("result unit must name both a metric and an imperial unit")
        return v

    def required_keys(self) -> tuple[str, ...]:
        raise NotImplementedError

    def optional_keys(self) -> tuple[str, ...]:
        return ()

    def referenced_keys(self) -> tuple[str, ...]:
        return self.required_keys() + self.optional_keys()

    def _compute(self, inputs: Mapping[str, float], unit_system: UnitSystem) -> float:
        raise NotImplementedError

    def empty_result(self) -> CalculationResult:
        return CalculationResult(label=self.label, value=None, unit=self.unit)

    def evaluate(self, inputs: Mapping[str, float], unit_system: UnitSystem) -> CalculationResult:
        if any(not inputs.get(key) for key in self.required_keys()):
            return self.empty_result()

        try:
            value = self._compute(inputs, unit_system)
        except (ZeroDivisionError, ValueError, OverflowError):
            return self.empty_result()

        if not math.isfinite(value):
            return self.empty_result()

        return CalculationResult(
            label=self.label,
            value=value,
            unit=self.unit,
            scale=self.scales.for_system(unit_system),
        )


class _FixedKeysFormula(_FormulaBase):
    """Variant whose input keys are fixed by the grinding formula itself."""

    REQUIRED: ClassVar[tuple[str, ...]] = ()
    OPTIONAL: ClassVar[tuple[str, ...]] = ()

    def required_keys(self) -> tuple[str, ...]:
        return self.REQUIRED

    def optional_keys(self) -> tuple[str, ...]:
        return self.OPTIONAL


# --- Grinding Formulas ---


class SpecificRemovalRate(_FixedKeysFormula):
    """Q'w: volume removed per unit wheel width per second."""

    REQUIRED: ClassVar[tuple[str, ...]] = ("vw", "ae")

    kind: Literal["specific_removal_rate"] = "specific_removal_rate"
    label: str = "Q'w"
    unit: UnitPair = UnitPair(metric="mm³/mm·s", imperial="in³/in·s")
    scales: SystemScales = SystemScales(
        metric=_scale(0, 50, 5, 25),
        imperial=_scale(0, 2, 0.2, 1),
    )

    def _compute(self, inputs: Mapping[str, float], unit_system: UnitSystem) -> float:
        vw, ae = inputs["vw"], inputs["ae"]
        if unit_system == "metric":
            return (vw * 1000 / 60) * ae
        return (vw * 12 / 60) * ae


class SpeedRatio(_FixedKeysFormula):
    """Qs: wheel peripheral speed over workpiece speed."""

    REQUIRED: ClassVar[tuple[str, ...]] = ("vs", "vw")

    kind: Literal["speed_ratio"] = "speed_ratio"
    label: str = "Qs"
    unit: UnitPair = UnitPair(metric="ratio", imperial="ratio")
    scales: SystemScales = SystemScales.same(_scale(0, 200, 40, 80))

    def _compute(self, inputs: Mapping[str, float], unit_system: UnitSystem) -> float:
        vs, vw = inputs["vs"], inputs["vw"]
        # vw is per minute, vs per second
        if unit_system == "metric":
            return vs / (vw / 60)
        return fps_to_mps(vs) / fps_to_mps(vw / 60)


class ChipThickness(_FixedKeysFormula):
    """Hm: average theoretical chip thickness per grain."""

    REQUIRED: ClassVar[tuple[str, ...]] = ("ae", "qs", "ds")
    OPTIONAL: ClassVar[tuple[str, ...]] = ("dw",)

    kind: Literal["chip_thickness"] = "chip_thickness"
    label: str = "Hm"
    unit: UnitPair = UnitPair(metric="μm", imperial="μin")
    scales: SystemScales = SystemScales(
        metric=_scale(0, 20, 2, 10),
        imperial=_scale(0, 800, 80, 400),
    )

    def _compute(self, inputs: Mapping[str, float], unit_system: UnitSystem) -> float:
        ae, qs, ds = inputs["ae"], inputs["qs"], inputs["ds"]
        deq = _equivalent_diameter(ds, inputs.get("dw", 0.0))
        # mm -> μm and inch -> μin share the same factor
        return 2 * math.sqrt(ae / deq) / qs * 1000


class ContactArcLength(_FixedKeysFormula):
    """La: length of the contact arc between wheel and workpiece."""

    REQUIRED: ClassVar[tuple[str, ...]] = ("ae", "ds")
    OPTIONAL: ClassVar[tuple[str, ...]] = ("dw",)

    kind: Literal["contact_arc_length"] = "contact_arc_length"
    label: str = "La"
    unit: UnitPair = UnitPair(metric="mm", imperial="inch")
    scales: SystemScales = SystemScales(
        metric=_scale(0, 20, 2, 10),
        imperial=_scale(0, 0.8, 0.08, 0.4),
    )

    def _compute(self, inputs: Mapping[str, float], unit_system: UnitSystem) -> float:
        ae, ds = inputs["ae"], inputs["ds"]
        deq = _equivalent_diameter(ds, inputs.get("dw", 0.0))
        return math.sqrt(ae * deq)


class DressingLead(_FixedKeysFormula):
    """Ud: single point diamond dressing lead per wheel revolution."""

    REQUIRED: ClassVar[tuple[str, ...]] = ("ns", "ad")

    kind: Literal["dressing_lead"] = "dressing_lead"
    label: str = "Ud"
    unit: UnitPair = UnitPair(metric="mm/rev", imperial="in/rev")
    scales: SystemScales = SystemScales(
        metric=_scale(0, 0.01, 0.001, 0.005),
        imperial=_scale(0, 0.0004, 0.00004, 0.0002),
    )
    lead_factor: float = 0.1

    def _compute(self, inputs: Mapping[str, float], unit_system: UnitSystem) -> float:
        ad = inputs["ad"]
        # ad is μm (metric) or μin (imperial)
        ad_mm = ad / 1000 if unit_system == "metric" else inch_to_mm(ad / 1_000_000)
        ud = ad_mm * self.lead_factor
        return ud if unit_system == "metric" else mm_to_inch(ud)


class DressingSpeedRatio(_FixedKeysFormula):
    """Vd: wheel speed over dresser speed."""

    REQUIRED: ClassVar[tuple[str, ...]] = ("vs", "vdr")

    kind: Literal["dressing_speed_ratio"] = "dressing_speed_ratio"
    label: str = "Vd"
    unit: UnitPair = UnitPair(metric="ratio", imperial="ratio")
    scales: SystemScales = SystemScales.same(_scale(0, 100, 10, 40))

    def _compute(self, inputs: Mapping[str, float], unit_system: UnitSystem) -> float:
        vs, vdr = inputs["vs"], inputs["vdr"]
        if unit_system == "metric":
            return vs / vdr
        return fps_to_mps(vs) / fps_to_mps(vdr)


class CoolantFlow(_FixedKeysFormula):
    """Qc: coolant flow required for a given removal rate and wheel width."""

    REQUIRED: ClassVar[tuple[str, ...]] = ("bw", "qw")

    kind: Literal["coolant_flow"] = "coolant_flow"
    label: str = "Qc"
    unit: UnitPair = UnitPair(metric="L/min", imperial="gal/min")
    scales: SystemScales = SystemScales(
        metric=_scale(0, 50, 5, 25),
        imperial=_scale(0, 13, 1.3, 6.6),
    )
    flow_factor: float = 0.5

    def _compute(self, inputs: Mapping[str, float], unit_system: UnitSystem) -> float:
        flow = inputs["bw"] * inputs["qw"] * self.flow_factor
        if unit_system == "imperial":
            return flow * LITERS_TO_GALLONS
        return flow / 1000 * 60


# --- Admin-authored Formulas ---


class SystemFactors(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric: float = 1.0
    imperial: float = 1.0

    def for_system(self, unit_system: UnitSystem) -> float:
        return self.metric if unit_system == "metric" else self.imperial


class ProductFormula(_FormulaBase):
    """Product of the listed inputs times a per-system factor."""

    kind: Literal["product"] = "product"
    keys: tuple[str, ...] = Field(min_length=1)
    factor: SystemFactors = Field(default_factory=SystemFactors)

    def required_keys(self) -> tuple[str, ...]:
        return self.keys

    def _compute(self, inputs: Mapping[str, float], unit_system: UnitSystem) -> float:
        return math.prod(inputs[k] for k in self.keys) * self.factor.for_system(unit_system)


class RatioFormula(_FormulaBase):
    """numerator / denominator times a per-system factor."""

    kind: Literal["ratio"] = "ratio"
    numerator: str = Field(min_length=1)
    denominator: str = Field(min_length=1)
    factor: SystemFactors = Field(default_factory=SystemFactors)

    def required_keys(self) -> tuple[str, ...]:
        return (self.numerator, self.denominator)

    def _compute(self, inputs: Mapping[str, float], unit_system: UnitSystem) -> float:
        return (
            inputs[self.numerator]
            / inputs[self.denominator]
            * self.factor.for_system(unit_system)
        )


# --- Tagged Union ---

Formula = Annotated[
    SpecificRemovalRate
    | SpeedRatio
    | ChipThickness
    | ContactArcLength
    | DressingLead
    | DressingSpeedRatio
    | CoolantFlow
    | ProductFormula
    | RatioFormula,
    Field(discriminator="kind"),
]

FORMULA_KINDS: tuple[str, ...] = (
    "specific_removal_rate",
    "speed_ratio",
    "chip_thickness",
    "contact_arc_length",
    "dressing_lead",
    "dressing_speed_ratio",
    "coolant_flow",
    "product",
    "ratio",
)

_formula_adapter: TypeAdapter[Formula] = TypeAdapter(Formula)


def parse_formula(data: Any) -> Formula:
    """Validate a JSON-compatible mapping into a formula variant."""
    return _formula_adapter.validate_python(data)


def dump_formula(formula: Formula) -> dict[str, Any]:
    result: dict[str, Any] = _formula_adapter.dump_python(formula, mode="json")
    return result
