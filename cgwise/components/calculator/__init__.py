"""
Calculator component - grinding calculator definitions and evaluation.

Holds the declarative calculator schema, the tagged formula variants,
the built-in catalog and the pure evaluation engine.
"""

from .catalog import (
    DEFAULT_CALCULATORS,
    BuiltinCatalog,
    get_calculator_by_id,
    get_calculators_by_category,
    get_categories,
)
from .component import (
    evaluate,
    evaluate_raw,
    parse_inputs,
    run,
    run_evaluate,
    run_get_calculator,
    run_list_catalog,
    sanitize_numeric_text,
)
from .formulas import (
    FORMULA_KINDS,
    ChipThickness,
    ContactArcLength,
    CoolantFlow,
    DressingLead,
    DressingSpeedRatio,
    Formula,
    ProductFormula,
    RatioFormula,
    SpecificRemovalRate,
    SpeedRatio,
    SystemFactors,
    dump_formula,
    parse_formula,
)
from .gauge import GaugePosition, gauge_position, is_optimal
from .models import (
    CalculatorDefinition,
    CalculatorOutput,
    CalculatorValidationError,
    CatalogOutput,
    EvaluateInput,
    EvaluateOutput,
    GetCalculatorInput,
    ListCatalogInput,
)
from .ports import CatalogPort
from .schema import (
    UNIT_SYSTEMS,
    CalculationResult,
    InputField,
    OptimalRange,
    ScaleAnnotation,
    SystemScales,
    UnitPair,
    UnitSystem,
)

__all__ = [
    # Entry points
    "run",
    "run_evaluate",
    "run_get_calculator",
    "run_list_catalog",
    # Engine
    "evaluate",
    "evaluate_raw",
    "parse_inputs",
    "sanitize_numeric_text",
    "gauge_position",
    "is_optimal",
    "GaugePosition",
    # Schema
    "UNIT_SYSTEMS",
    "UnitSystem",
    "UnitPair",
    "InputField",
    "OptimalRange",
    "ScaleAnnotation",
    "SystemScales",
    "CalculationResult",
    "CalculatorDefinition",
    # Formulas
    "FORMULA_KINDS",
    "Formula",
    "SpecificRemovalRate",
    "SpeedRatio",
    "ChipThickness",
    "ContactArcLength",
    "DressingLead",
    "DressingSpeedRatio",
    "CoolantFlow",
    "ProductFormula",
    "RatioFormula",
    "SystemFactors",
    "parse_formula",
    "dump_formula",
    # Catalog
    "DEFAULT_CALCULATORS",
    "BuiltinCatalog",
    "get_calculator_by_id",
    "get_calculators_by_category",
    "get_categories",
    # Models
    "EvaluateInput",
    "EvaluateOutput",
    "GetCalculatorInput",
    "CalculatorOutput",
    "ListCatalogInput",
    "CatalogOutput",
    "CalculatorValidationError",
    # Ports
    "CatalogPort",
]
