"""
Audit component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from cgwise.domain.entities import EmailRecord, SystemLog


class SystemLogRepoPort(Protocol):
    """Append-only store of system log entries."""

    def save(self, entry: SystemLog) -> SystemLog: ...
    def list_recent(self, limit: int) -> list[SystemLog]: ...


class MailerPort(Protocol):
    """Outbound mail. Implementations record the message rather than send it."""

    def send(self, record: EmailRecord) -> EmailRecord: ...
    def list_recent(self, limit: int) -> list[EmailRecord]: ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
