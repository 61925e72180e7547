"""
Access component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from cgwise.domain.entities import AccessRequest, RoleType, UnitPreference, User, UserStatus


@dataclass(frozen=True)
class AccessValidationError:
    field: str
    code: str
    message: str


@dataclass(frozen=True)
class RequestAccessInput:
    email: str
    name: str
    password: str
    company: str
    position: str
    country: str
    preferred_units: UnitPreference = "metric"


@dataclass(frozen=True)
class UpgradeGuestInput:
    email: str
    name: str
    password: str
    company: str
    position: str
    country: str
    preferred_units: UnitPreference = "metric"
    guest_session_id: str | None = None


@dataclass(frozen=True)
class ListRequestsInput:
    actor: User


@dataclass(frozen=True)
class ApproveRequestInput:
    actor: User
    request_id: UUID
    role: RoleType = "starter"


@dataclass(frozen=True)
class RejectRequestInput:
    actor: User
    request_id: UUID
    reason: str | None = None


@dataclass(frozen=True)
class ListUsersInput:
    actor: User


@dataclass(frozen=True)
class UpdateUserInput:
    actor: User
    target_id: UUID
    name: str | None = None
    role: RoleType | None = None
    status: UserStatus | None = None
    company: str | None = None
    position: str | None = None
    country: str | None = None


@dataclass(frozen=True)
class AccessRequestOutput:
    request: AccessRequest | None = None
    errors: list[AccessValidationError] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass(frozen=True)
class RequestListOutput:
    requests: list[AccessRequest] = field(default_factory=list)
    success: bool = True
    error: str | None = None


@dataclass(frozen=True)
class UserOutput:
    user: User | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass(frozen=True)
class UserListOutput:
    users: list[User] = field(default_factory=list)
    success: bool = True
    error: str | None = None
