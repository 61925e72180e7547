"""
History component models - saved calculation snapshots and guest mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from cgwise.components.calculator import CalculationResult, UnitSystem
from cgwise.domain.entities import GuestSession, User, utc_now


class SavedCalculation(BaseModel):
    """
    Snapshot of one evaluation as the user saw it.

    Names and the result are copied at save time, so later edits to the
    calculator never rewrite history.
    """

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    calculator_id: str
    calculator_name: str
    calculator_short_name: str
    inputs: dict[str, float] = Field(default_factory=dict)
    result: CalculationResult
    unit_system: UnitSystem = "metric"
    notes: str | None = None
    saved_at: datetime = Field(default_factory=utc_now)


class GuestCalculation(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    session_id: str
    calculator_id: str
    calculator_name: str
    calculator_short_name: str
    inputs: dict[str, float] = Field(default_factory=dict)
    result: CalculationResult
    unit_system: UnitSystem = "metric"
    saved_at: datetime = Field(default_factory=utc_now)


# --- Inputs ---


@dataclass(frozen=True)
class SaveCalculationInput:
    actor: User
    calculator_id: str
    inputs: dict[str, float]
    unit_system: UnitSystem = "metric"
    notes: str | None = None


@dataclass(frozen=True)
class ListCalculationsInput:
    actor: User


@dataclass(frozen=True)
class ListByDateInput:
    actor: User
    start: datetime | None = None
    end: datetime | None = None


@dataclass(frozen=True)
class DeleteCalculationInput:
    actor: User
    calculation_id: UUID


@dataclass(frozen=True)
class ClearCalculationsInput:
    actor: User


@dataclass(frozen=True)
class CreateGuestSessionInput:
    pass


@dataclass(frozen=True)
class GuestSessionInput:
    """Addresses one guest session (get, list, clear)."""

    session_id: str


@dataclass(frozen=True)
class SaveGuestCalculationInput:
    session_id: str
    calculator_id: str
    inputs: dict[str, float]
    unit_system: UnitSystem = "metric"


@dataclass(frozen=True)
class CleanupGuestSessionsInput:
    retention_days: int


# --- Outputs ---


@dataclass(frozen=True)
class HistoryError:
    code: str
    message: str


@dataclass(frozen=True)
class CalculationOutput:
    calculation: SavedCalculation | None = None
    error: HistoryError | None = None
    success: bool = True


@dataclass(frozen=True)
class CalculationListOutput:
    calculations: list[SavedCalculation] = field(default_factory=list)
    deleted: int = 0
    success: bool = True


@dataclass(frozen=True)
class GuestSessionOutput:
    session: GuestSession | None = None
    calculation: GuestCalculation | None = None
    error: HistoryError | None = None
    success: bool = True


@dataclass(frozen=True)
class GuestCalculationListOutput:
    calculations: list[GuestCalculation] = field(default_factory=list)
    session: GuestSession | None = None
    error: HistoryError | None = None
    success: bool = True


@dataclass(frozen=True)
class CleanupOutput:
    deleted: int = 0
