"""
Settings component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class SettingsRepoPort(Protocol):
    """Key/value store for system settings. Values are stored as text."""

    def get(self, key: str) -> str | None:
        """Raw stored value, or None if the key was never set."""
        ...

    def get_all(self) -> dict[str, str]:
        ...

    def set(self, key: str, value: str, updated_at: datetime) -> None:
        """Insert or replace one setting."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
