"""
Calculator component - evaluate grinding calculators from raw form text.

Turns the text a user typed into numbers, applies the calculator's formula
for the active unit system and returns a display-ready result.

Evaluation never raises for bad input: malformed text reads as 0, and
missing or zero required inputs produce a result with ``value=None``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

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
from .schema import CalculationResult, InputField, UnitSystem

# --- Parsing ---

_NUMERIC_CHARS = frozenset("0123456789.")


def sanitize_numeric_text(text: str) -> str:
    """
    Reduce free text to digits and at most one decimal point.

    Every character other than a digit or '.' is dropped, then the text is
    cut just before a second '.'.

    >>> sanitize_numeric_text("1,234.5.6 mm")
    '1234.5'
    """
    kept = "".join(ch for ch in text if ch in _NUMERIC_CHARS)
    head, dot, tail = kept.partition(".")
    if not dot:
        return head
    return head + "." + tail.split(".", 1)[0]


def _to_float(text: str) -> float:
    cleaned = sanitize_numeric_text(text)
    if not cleaned or cleaned == ".":
        return 0.0
    try:
        value = float(cleaned)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def parse_inputs(
    raw_values: Mapping[str, str | None],
    fields: Iterable[InputField],
) -> dict[str, float]:
    """Parse raw form text for each field, in field order. Missing keys read as 0."""
    parsed: dict[str, float] = {}
    for f in fields:
        raw = raw_values.get(f.key)
        parsed[f.key] = _to_float(raw) if raw else 0.0
    return parsed


# --- Evaluation ---


def evaluate(
    definition: CalculatorDefinition,
    inputs: Mapping[str, float],
    unit_system: UnitSystem,
) -> CalculationResult:
    """
    Evaluate a calculator on parsed inputs.

    When no input carries data (all zero, or none given) the formula sees an
    empty mapping, which every formula answers with ``value=None``.
    """
    has_data = any(v != 0 for v in inputs.values())
    result = definition.formula.evaluate(inputs if has_data else {}, unit_system)

    if result.value is not None and not math.isfinite(result.value):
        return result.model_copy(update={"value": None, "scale": None})
    return result


def evaluate_raw(
    definition: CalculatorDefinition,
    raw_values: Mapping[str, str | None],
    unit_system: UnitSystem,
) -> CalculationResult:
    return evaluate(definition, parse_inputs(raw_values, definition.inputs), unit_system)


# --- Component Entry Points ---


def _not_found(calculator_id: str) -> CalculatorValidationError:
    return CalculatorValidationError(
        code="not_found",
        message=f"Calculator '{calculator_id}' not found",
        field="calculator_id",
    )


def run_evaluate(inp: EvaluateInput, *, catalog: CatalogPort) -> EvaluateOutput:
    definition = catalog.get(inp.calculator_id)
    if definition is None:
        return EvaluateOutput(errors=[_not_found(inp.calculator_id)], success=False)

    inputs = parse_inputs(inp.raw_values, definition.inputs)
    result = evaluate(definition, inputs, inp.unit_system)
    return EvaluateOutput(result=result, inputs=inputs)


def run_get_calculator(inp: GetCalculatorInput, *, catalog: CatalogPort) -> CalculatorOutput:
    definition = catalog.get(inp.calculator_id)
    if definition is None:
        return CalculatorOutput(errors=[_not_found(inp.calculator_id)], success=False)
    return CalculatorOutput(calculator=definition)


def run_list_catalog(inp: ListCatalogInput, *, catalog: CatalogPort) -> CatalogOutput:
    """
    List enabled calculators, optionally narrowed to one category.

    Categories are always those of the full enabled set, in order of first
    appearance, so a client can render its filter bar from any response.
    """
    calculators = catalog.list_enabled()
    categories = tuple(dict.fromkeys(cat for c in calculators for cat in c.categories))
    if inp.category:
        calculators = [c for c in calculators if inp.category in c.categories]
    return CatalogOutput(calculators=tuple(calculators), categories=categories)


def run(
    inp: EvaluateInput | GetCalculatorInput | ListCatalogInput,
    *,
    catalog: CatalogPort,
) -> EvaluateOutput | CalculatorOutput | CatalogOutput:
    if isinstance(inp, EvaluateInput):
        return run_evaluate(inp, catalog=catalog)
    elif isinstance(inp, GetCalculatorInput):
        return run_get_calculator(inp, catalog=catalog)
    elif isinstance(inp, ListCatalogInput):
        return run_list_catalog(inp, catalog=catalog)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
