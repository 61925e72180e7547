from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, Field

from cgwise.components.calculator import CalculationResult, UnitSystem
from cgwise.domain.entities import (
    AccessRequest,
    ColorblindMode,
    FontSize,
    GuestSession,
    RoleType,
    ThemePreference,
    UnitPreference,
    User,
    UserStatus,
)

NonNegative = Annotated[float, Field(ge=0)]


# --- Auth ---
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: UUID
    email: str
    name: str
    role: RoleType
    status: UserStatus
    is_admin: bool
    unit_preference: UnitPreference
    theme_preference: ThemePreference | None = None
    colorblind_mode: ColorblindMode | None = None
    font_size: FontSize | None = None
    company: str | None = None
    position: str | None = None
    country: str | None = None
    created_at: datetime
    last_login: datetime | None = None

    @classmethod
    def from_user(cls, user: User, *, is_admin: bool | None = None) -> "UserResponse":
        data = user.model_dump(exclude={"password_hash"})
        return cls(**data, is_admin=user.is_admin if is_admin is None else is_admin)


class LoginResponse(Token):
    user: UserResponse


class PreferencesUpdateRequest(BaseModel):
    unit_preference: UnitPreference | None = None
    theme_preference: ThemePreference | None = None
    colorblind_mode: ColorblindMode | None = None
    font_size: FontSize | None = None


# --- Access ---
class RequestAccessRequest(BaseModel):
    email: str
    name: str
    password: str
    company: str
    position: str
    country: str
    preferred_units: UnitPreference = "metric"


class UpgradeGuestRequest(RequestAccessRequest):
    guest_session_id: str | None = None


class AccessRequestResponse(BaseModel):
    id: UUID
    email: str
    name: str
    company: str
    position: str
    country: str
    preferred_units: UnitPreference
    role: RoleType
    status: str
    created_at: datetime

    @classmethod
    def from_request(cls, request: AccessRequest) -> "AccessRequestResponse":
        return cls(**request.model_dump(exclude={"password_hash"}))


class ApproveRequest(BaseModel):
    role: RoleType = "starter"


class RejectRequest(BaseModel):
    reason: str | None = None


class UserUpdateRequest(BaseModel):
    name: str | None = None
    role: RoleType | None = None
    status: UserStatus | None = None
    company: str | None = None
    position: str | None = None
    country: str | None = None


# --- Calculators ---
class EvaluateRequest(BaseModel):
    """Raw form text keyed by input key; sanitized server-side."""

    values: dict[str, str] = Field(default_factory=dict)
    unit_system: UnitSystem = "metric"


class GaugeResponse(BaseModel):
    position: float
    optimal_start: float
    optimal_end: float


class EvaluateResponse(BaseModel):
    calculator_id: str
    unit_system: UnitSystem
    inputs: dict[str, float]
    result: CalculationResult
    result_unit: str
    gauge: GaugeResponse | None = None
    optimal: bool | None = None


# --- History ---
class SaveCalculationRequest(BaseModel):
    calculator_id: str
    inputs: dict[str, NonNegative] = Field(default_factory=dict)
    unit_system: UnitSystem = "metric"
    notes: str | None = None


class GuestCalculationRequest(BaseModel):
    calculator_id: str
    inputs: dict[str, NonNegative] = Field(default_factory=dict)
    unit_system: UnitSystem = "metric"


class GuestSessionResponse(BaseModel):
    id: str
    calculation_count: int
    max_calculations: int
    remaining: int
    created_at: datetime
    last_activity: datetime

    @classmethod
    def from_session(cls, session: GuestSession) -> "GuestSessionResponse":
        return cls(**session.model_dump(), remaining=session.remaining)


# --- Settings ---
class SettingUpdateRequest(BaseModel):
    value: Any
