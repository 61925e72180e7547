"""
History component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from cgwise.domain.entities import GuestSession

from .models import GuestCalculation, SavedCalculation


class SavedCalculationRepoPort(Protocol):
    def save(self, calculation: SavedCalculation) -> SavedCalculation: ...
    def get(self, calculation_id: UUID) -> SavedCalculation | None: ...

    def list_by_user(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[SavedCalculation]:
        """Newest first; ``start``/``end`` bound ``saved_at`` inclusively."""
        ...

    def delete(self, calculation_id: UUID) -> None: ...
    def delete_by_user(self, user_id: UUID) -> int: ...


class GuestRepoPort(Protocol):
    def save_session(self, session: GuestSession) -> GuestSession: ...
    def get(self, session_id: str) -> GuestSession | None: ...
    def delete(self, session_id: str) -> None: ...

    def delete_idle_before(self, cutoff: datetime) -> int:
        """Delete sessions (and their calculations) last active before cutoff."""
        ...

    def save_calculation(self, calculation: GuestCalculation) -> GuestCalculation: ...
    def list_calculations(self, session_id: str) -> list[GuestCalculation]: ...
    def count_calculations(self, session_id: str) -> int: ...
    def delete_calculations(self, session_id: str) -> int: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
