"""
Calculator component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from .models import CalculatorDefinition


class CatalogPort(Protocol):
    """Read access to the calculators currently offered to users."""

    def get(self, calculator_id: str) -> CalculatorDefinition | None:
        """Get an enabled calculator by id, or None."""
        ...

    def list_enabled(self) -> list[CalculatorDefinition]:
        """Enabled calculators in display order."""
        ...
