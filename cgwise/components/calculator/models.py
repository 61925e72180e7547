"""
Calculator component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .formulas import Formula, dump_formula
from .schema import CalculationResult, InputField, UnitPair, UnitSystem

# --- Definition ---


class CalculatorDefinition(BaseModel):
    """
    A calculator: ordered input fields plus the formula that reads them.

    Invariants:
    - input keys are unique
    - every key the formula reads is one of the inputs
    - categories keep their first-seen order without repeats
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    short_name: str = Field(min_length=1)
    description: str = ""
    categories: tuple[str, ...] = ()
    inputs: tuple[InputField, ...] = ()
    formula: Formula

    @field_validator("categories")
    @classmethod
    def _unique_categories(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(v))

    @model_validator(mode="after")
    def _check_keys(self) -> CalculatorDefinition:
        keys = [f.key for f in self.inputs]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise ValueError(f"duplicate input keys: {', '.join(duplicates)}")

        unknown = [k for k in self.formula.referenced_keys() if k not in keys]
        if unknown:
            raise ValueError(f"formula references unknown input keys: {', '.join(unknown)}")
        return self

    @property
    def result_unit(self) -> UnitPair:
        return self.formula.unit

    def get_field(self, key: str) -> InputField | None:
        return next((f for f in self.inputs if f.key == key), None)

    def to_json_dict(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", exclude={"formula"})
        data["formula"] = dump_formula(self.formula)
        data["result_unit"] = self.result_unit.model_dump()
        return data


# --- Validation Error ---


@dataclass(frozen=True)
class CalculatorValidationError:
    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class EvaluateInput:
    """Raw form text for one calculator."""

    calculator_id: str
    raw_values: dict[str, str] = field(default_factory=dict)
    unit_system: UnitSystem = "metric"


@dataclass(frozen=True)
class GetCalculatorInput:
    calculator_id: str


@dataclass(frozen=True)
class ListCatalogInput:
    category: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class EvaluateOutput:
    result: CalculationResult | None = None
    inputs: dict[str, float] = field(default_factory=dict)
    errors: list[CalculatorValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class CalculatorOutput:
    calculator: CalculatorDefinition | None = None
    errors: list[CalculatorValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class CatalogOutput:
    calculators: tuple[CalculatorDefinition, ...] = ()
    categories: tuple[str, ...] = ()
    success: bool = True
