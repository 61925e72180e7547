"""
Built-in grinding calculator catalog.

Seeds the persisted catalog on first start and backs the CLI.
"""

from __future__ import annotations

from .formulas import (
    ChipThickness,
    ContactArcLength,
    CoolantFlow,
    DressingLead,
    DressingSpeedRatio,
    SpecificRemovalRate,
    SpeedRatio,
)
from .models import CalculatorDefinition
from .schema import InputField, UnitPair

# --- Shared Input Fields ---

WORKPIECE_SPEED = InputField(
    key="vw",
    label="Workpiece Speed",
    unit=UnitPair(metric="m/min", imperial="ft/min"),
    placeholder=UnitPair(metric="10-50", imperial="30-150"),
    tooltip="Speed of the workpiece surface",
    min=0,
    max=100,
    step=0.1,
)

DEPTH_OF_CUT = InputField(
    key="ae",
    label="Depth of Cut",
    unit=UnitPair(metric="mm", imperial="inch"),
    placeholder=UnitPair(metric="0.01-0.5", imperial="0.0004-0.02"),
    tooltip="Radial depth of material being removed",
    min=0,
    max=10,
    step=0.001,
)

WHEEL_SPEED = InputField(
    key="vs",
    label="Wheel Speed",
    unit=UnitPair(metric="m/s", imperial="ft/s"),
    placeholder=UnitPair(metric="25-45", imperial="80-150"),
    tooltip="Peripheral speed of the grinding wheel",
    min=0,
    max=100,
    step=0.1,
)

WHEEL_DIAMETER = InputField(
    key="ds",
    label="Wheel Diameter",
    unit=UnitPair(metric="mm", imperial="inch"),
    placeholder=UnitPair(metric="200-500", imperial="8-20"),
    tooltip="Diameter of the grinding wheel",
    min=1,
    max=1000,
    step=1,
)

WORKPIECE_DIAMETER = InputField(
    key="dw",
    label="Workpiece Diameter",
    unit=UnitPair(metric="mm", imperial="inch"),
    placeholder=UnitPair(metric="20-200", imperial="1-8"),
    tooltip="Diameter of the workpiece (0 for flat)",
    min=0,
    max=1000,
    step=1,
)


DEFAULT_CALCULATORS: tuple[CalculatorDefinition, ...] = (
    CalculatorDefinition(
        id="qw",
        name="Specific Material Removal Rate",
        short_name="Q'w",
        description="Calculate the volume of material removed per unit width per unit time",
        categories=("Surface Grinding",),
        inputs=(WORKPIECE_SPEED, DEPTH_OF_CUT),
        formula=SpecificRemovalRate(),
    ),
    CalculatorDefinition(
        id="qs",
        name="Speed Ratio",
        short_name="Qs",
        description="Ratio between wheel speed and workpiece speed",
        categories=("Surface Grinding", "OD Grinding", "ID Grinding"),
        inputs=(WHEEL_SPEED, WORKPIECE_SPEED),
        formula=SpeedRatio(),
    ),
    CalculatorDefinition(
        id="hm",
        name="Theoretical Chip Thickness",
        short_name="Hm",
        description="Average thickness of material removed by each grain",
        categories=("ID Grinding", "OD Grinding", "Surface Grinding"),
        inputs=(
            DEPTH_OF_CUT,
            InputField(
                key="qs",
                label="Speed Ratio",
                unit=UnitPair(metric="", imperial=""),
                placeholder=UnitPair(metric="40-80", imperial="40-80"),
                tooltip="Ratio between wheel and workpiece speed",
                min=1,
                max=200,
                step=1,
            ),
            WHEEL_DIAMETER,
            WORKPIECE_DIAMETER,
        ),
        formula=ChipThickness(),
    ),
    CalculatorDefinition(
        id="la",
        name="Contact Arc Length",
        short_name="La",
        description="Length of the contact arc between wheel and workpiece",
        categories=("OD Grinding", "ID Grinding", "Surface Grinding"),
        inputs=(DEPTH_OF_CUT, WHEEL_DIAMETER, WORKPIECE_DIAMETER),
        formula=ContactArcLength(),
    ),
    CalculatorDefinition(
        id="ud",
        name="Dressing Lead",
        short_name="Ud",
        description="Lead rate for single point diamond dressing",
        categories=("Dressing",),
        inputs=(
            InputField(
                key="ns",
                label="Wheel Speed",
                unit=UnitPair(metric="rpm", imperial="rpm"),
                placeholder=UnitPair(metric="1000-3000", imperial="1000-3000"),
                tooltip="Rotational speed of the grinding wheel",
                min=100,
                max=5000,
                step=10,
            ),
            InputField(
                key="ad",
                label="Dressing Depth",
                unit=UnitPair(metric="μm", imperial="μin"),
                placeholder=UnitPair(metric="5-25", imperial="200-1000"),
                tooltip="Depth of cut during dressing",
                min=1,
                max=100,
                step=1,
            ),
        ),
        formula=DressingLead(),
    ),
    CalculatorDefinition(
        id="vd",
        name="Dressing Speed Ratio",
        short_name="Vd",
        description="Speed ratio between wheel and dresser",
        categories=("Dressing",),
        inputs=(
            WHEEL_SPEED,
            InputField(
                key="vdr",
                label="Dresser Speed",
                unit=UnitPair(metric="m/s", imperial="ft/s"),
                placeholder=UnitPair(metric="0.5-2", imperial="1.5-6"),
                tooltip="Speed of the dressing tool",
                min=0,
                max=10,
                step=0.1,
            ),
        ),
        formula=DressingSpeedRatio(),
    ),
    CalculatorDefinition(
        id="coolant_flow",
        name="Coolant Flow Rate",
        short_name="Qc",
        description="Required coolant flow rate for grinding operation",
        categories=("Coolant",),
        inputs=(
            InputField(
                key="bw",
                label="Wheel Width",
                unit=UnitPair(metric="mm", imperial="inch"),
                placeholder=UnitPair(metric="10-50", imperial="0.4-2"),
                tooltip="Width of the grinding wheel",
                min=1,
                max=100,
                step=1,
            ),
            InputField(
                key="qw",
                label="Material Removal Rate",
                unit=UnitPair(metric="mm³/mm·s", imperial="in³/in·s"),
                placeholder=UnitPair(metric="5-25", imperial="0.2-1"),
                tooltip="Specific material removal rate",
                min=0.1,
                max=50,
                step=0.1,
            ),
        ),
        formula=CoolantFlow(),
    ),
)


def get_calculator_by_id(
    calculator_id: str,
    calculators: tuple[CalculatorDefinition, ...] = DEFAULT_CALCULATORS,
) -> CalculatorDefinition | None:
    return next((c for c in calculators if c.id == calculator_id), None)


def get_calculators_by_category(
    category: str,
    calculators: tuple[CalculatorDefinition, ...] = DEFAULT_CALCULATORS,
) -> list[CalculatorDefinition]:
    return [c for c in calculators if category in c.categories]


def get_categories(
    calculators: tuple[CalculatorDefinition, ...] = DEFAULT_CALCULATORS,
) -> list[str]:
    """Distinct categories in order of first appearance."""
    return list(dict.fromkeys(cat for c in calculators for cat in c.categories))


class BuiltinCatalog:
    """CatalogPort over the in-code default calculators."""

    def __init__(self, calculators: tuple[CalculatorDefinition, ...] = DEFAULT_CALCULATORS):
        self._calculators = calculators

    def get(self, calculator_id: str) -> CalculatorDefinition | None:
        return get_calculator_by_id(calculator_id, self._calculators)

    def list_enabled(self) -> list[CalculatorDefinition]:
        return list(self._calculators)
