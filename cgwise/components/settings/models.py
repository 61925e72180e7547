"""
Settings component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cgwise.domain.entities import User

SettingValue = int | bool


@dataclass(frozen=True)
class SettingSpec:
    """Type and lower bound of one system setting."""

    key: str
    kind: type[int] | type[bool]
    default: SettingValue
    min_value: int | None = None


@dataclass(frozen=True)
class ValidationError:
    """Validation error with actionable message."""

    field: str
    code: str
    message: str


@dataclass(frozen=True)
class GetSettingsInput:
    pass


@dataclass(frozen=True)
class GetSettingsOutput:
    settings: dict[str, SettingValue]


@dataclass(frozen=True)
class UpdateSettingInput:
    actor: User
    key: str
    value: Any


@dataclass(frozen=True)
class UpdateSettingOutput:
    settings: dict[str, SettingValue] = field(default_factory=dict)
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True
