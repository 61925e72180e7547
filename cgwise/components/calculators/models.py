"""
Calculators component models - persisted calculator catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from cgwise.components.calculator import CalculatorDefinition, CalculatorValidationError
from cgwise.domain.entities import User, utc_now


class CalculatorRecord(BaseModel):
    """A catalog entry: the definition plus its admin-controlled state."""

    definition: CalculatorDefinition
    enabled: bool = True
    usage_count: int = 0
    position: int = 0
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def id(self) -> str:
        return self.definition.id

    def to_json_dict(self) -> dict[str, Any]:
        data = self.definition.to_json_dict()
        data.update(
            enabled=self.enabled,
            usage_count=self.usage_count,
            created_at=self.created_at.isoformat(),
            updated_at=self.updated_at.isoformat(),
        )
        return data


# --- Inputs ---


@dataclass(frozen=True)
class ListEnabledInput:
    pass


@dataclass(frozen=True)
class GetRecordInput:
    calculator_id: str


@dataclass(frozen=True)
class TrackUsageInput:
    calculator_id: str


@dataclass(frozen=True)
class ListAllInput:
    actor: User


@dataclass(frozen=True)
class CreateCalculatorInput:
    """``data`` holds the definition fields except ``id``."""

    actor: User
    data: dict[str, Any]
    enabled: bool = True


@dataclass(frozen=True)
class UpdateCalculatorInput:
    actor: User
    calculator_id: str
    updates: dict[str, Any] = field(default_factory=dict)
    enabled: bool | None = None


@dataclass(frozen=True)
class DeleteCalculatorInput:
    actor: User
    calculator_id: str


@dataclass(frozen=True)
class ResetCatalogInput:
    actor: User


# --- Outputs ---


@dataclass(frozen=True)
class RecordOutput:
    record: CalculatorRecord | None = None
    errors: list[CalculatorValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RecordListOutput:
    records: list[CalculatorRecord] = field(default_factory=list)
    errors: list[CalculatorValidationError] = field(default_factory=list)
    success: bool = True
