"""
Audit component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cgwise.domain.entities import EmailRecord, SystemLog, User


@dataclass(frozen=True)
class ListLogsInput:
    actor: User
    limit: int = 100


@dataclass(frozen=True)
class ListEmailsInput:
    actor: User
    limit: int = 100


@dataclass(frozen=True)
class LogListOutput:
    logs: list[SystemLog] = field(default_factory=list)
    success: bool = True
    error: str | None = None


@dataclass(frozen=True)
class EmailListOutput:
    emails: list[EmailRecord] = field(default_factory=list)
    success: bool = True
    error: str | None = None
