"""
Calculators component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .models import CalculatorRecord


class CalculatorRepoPort(Protocol):
    """Repository interface for catalog records."""

    def get(self, calculator_id: str) -> CalculatorRecord | None: ...

    def list_all(self) -> list[CalculatorRecord]:
        """All records, most used first, then by position."""
        ...

    def save(self, record: CalculatorRecord) -> CalculatorRecord:
        """Insert or replace a record."""
        ...

    def delete(self, calculator_id: str) -> bool:
        """Delete a record. Returns False if it did not exist."""
        ...

    def delete_all(self) -> None: ...

    def increment_usage(self, calculator_id: str) -> bool:
        """Atomically bump usage_count. Returns False if the id is unknown."""
        ...

    def count(self) -> int: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
