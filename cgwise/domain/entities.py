from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(UTC)


# --- Enums / Literals ---
RoleType = Literal["admin", "premium", "starter"]
UserStatus = Literal["pending", "approved", "rejected", "suspended"]
UnitPreference = Literal["metric", "imperial"]
ThemePreference = Literal["light", "dark", "system"]
ColorblindMode = Literal["none", "protanopia", "deuteranopia", "tritanopia"]
FontSize = Literal["small", "medium", "large", "extra-large"]
LogType = Literal["info", "warning", "error"]
EmailType = Literal["request", "approval", "rejection"]

ROLES: tuple[RoleType, ...] = ("admin", "premium", "starter")
USER_STATUSES: tuple[UserStatus, ...] = ("pending", "approved", "rejected", "suspended")

# --- Users & Access ---

class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    name: str
    password_hash: str
    role: RoleType = "starter"
    status: UserStatus = "pending"
    unit_preference: UnitPreference = "metric"
    theme_preference: ThemePreference | None = None
    colorblind_mode: ColorblindMode | None = None
    font_size: FontSize | None = None
    company: str | None = None
    position: str | None = None
    country: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    last_login: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

class AccessRequest(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    name: str
    password_hash: str
    company: str
    position: str
    country: str
    preferred_units: UnitPreference = "metric"
    role: RoleType = "starter"
    status: Literal["pending"] = "pending"
    created_at: datetime = Field(default_factory=utc_now)

class LoginAttempt(BaseModel):
    """Failed-login counter for one email address."""

    email: str
    attempts: int = 0
    last_attempt: datetime = Field(default_factory=utc_now)
    locked_until: datetime | None = None

# --- Guest Mode ---

class GuestSession(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    calculation_count: int = 0
    max_calculations: int = 50
    created_at: datetime = Field(default_factory=utc_now)
    last_activity: datetime = Field(default_factory=utc_now)

    @property
    def remaining(self) -> int:
        return max(0, self.max_calculations - self.calculation_count)

# --- Audit ---

class SystemLog(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    type: LogType = "info"
    message: str
    timestamp: datetime = Field(default_factory=utc_now)
    user: str

class EmailRecord(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    from_email: str
    to_email: str
    subject: str
    body: str
    type: EmailType
    sent_at: datetime = Field(default_factory=utc_now)
    status: str = "recorded"
