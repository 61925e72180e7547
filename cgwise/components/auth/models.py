from dataclasses import dataclass
from typing import Literal

from cgwise.domain.entities import (
    ColorblindMode,
    FontSize,
    ThemePreference,
    UnitPreference,
    User,
)

AuthErrorCode = Literal["unauthorized", "forbidden", "locked", "not_found", "invalid"]


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class CreateSessionInput:
    user: User


@dataclass
class VerifyTokenInput:
    token: str


@dataclass
class UpdatePreferencesInput:
    actor: User
    unit_preference: UnitPreference | None = None
    theme_preference: ThemePreference | None = None
    colorblind_mode: ColorblindMode | None = None
    font_size: FontSize | None = None


@dataclass
class CreateAdminInput:
    email: str
    name: str
    password: str


@dataclass
class AuthOutput:
    user: User | None = None
    token_raw: str | None = None
    success: bool = False
    error: str | None = None
    error_code: AuthErrorCode | None = None


@dataclass
class UserOutput:
    user: User | None = None
    success: bool = False
    error: str | None = None
