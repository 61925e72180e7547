"""
Access component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from cgwise.domain.entities import AccessRequest, GuestSession, User


class AccessRequestRepoPort(Protocol):
    def get_by_id(self, request_id: UUID) -> AccessRequest | None: ...
    def get_by_email(self, email: str) -> AccessRequest | None: ...
    def save(self, request: AccessRequest) -> AccessRequest: ...
    def delete(self, request_id: UUID) -> None: ...
    def list_all(self) -> list[AccessRequest]: ...


class UserRepoPort(Protocol):
    def get_by_email(self, email: str) -> User | None: ...
    def get_by_id(self, user_id: UUID) -> User | None: ...
    def save(self, user: User) -> User: ...
    def list_all(self) -> list[User]: ...


class GuestSessionPort(Protocol):
    """The slice of guest storage needed to retire a session on upgrade."""

    def get(self, session_id: str) -> GuestSession | None: ...
    def count_calculations(self, session_id: str) -> int: ...
    def delete(self, session_id: str) -> None: ...


class PasswordHasherPort(Protocol):
    def hash_password(self, plain: str) -> str: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
