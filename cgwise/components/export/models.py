"""
Export component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from cgwise.domain.entities import User


@dataclass(frozen=True)
class ExportPdfInput:
    actor: User
    start: datetime | None = None
    end: datetime | None = None


@dataclass(frozen=True)
class ExportOutput:
    content: bytes
    filename: str
    count: int
    media_type: str = "application/pdf"
