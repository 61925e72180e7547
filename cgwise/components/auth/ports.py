from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from cgwise.domain.entities import AccessRequest, LoginAttempt, User


class UserRepoPort(Protocol):
    def get_by_email(self, email: str) -> User | None: ...
    def get_by_id(self, user_id: UUID) -> User | None: ...
    def save(self, user: User) -> User: ...
    def list_all(self) -> list[User]: ...


class AccessRequestLookupPort(Protocol):
    def get_by_email(self, email: str) -> AccessRequest | None: ...


class LoginAttemptRepoPort(Protocol):
    """Failed-login counters keyed by email."""

    def get(self, email: str) -> LoginAttempt | None: ...
    def save(self, attempt: LoginAttempt) -> LoginAttempt: ...
    def delete(self, email: str) -> None: ...


class AuthAdapterPort(Protocol):
    def verify_password(self, plain: str, hashed: str) -> bool: ...
    def hash_password(self, plain: str) -> str: ...
    def create_token(self, user_id: Any, ttl_minutes: int) -> str: ...
    def validate_token(self, token: str) -> Any | None: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
