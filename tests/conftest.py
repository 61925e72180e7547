from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

import pytest

from cgwise.adapters.dev_email import DevEmailAdapter
from cgwise.adapters.sqlite.migrator import SQLiteMigrator
from cgwise.components.calculators import CalculatorRecord
from cgwise.components.history import GuestCalculation, SavedCalculation
from cgwise.domain.entities import (
    AccessRequest,
    GuestSession,
    LoginAttempt,
    SystemLog,
    User,
)
from cgwise.domain.policy import PolicyEngine
from cgwise.rules.loader import load_rules
from cgwise.rules.models import Rules

SUPER_ADMIN_EMAIL = "dolevb@cgwheels.com"

# --- Mock Implementations ---


class MockTimePort:
    """Deterministic clock; ``advance`` moves it forward."""

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs: Any) -> None:
        self._now = self._now + timedelta(**kwargs)


class MockAuthAdapter:
    """Hash is "hashed_" + plain; tokens are "token_<user id>"."""

    def verify_password(self, plain: str, hashed: str) -> bool:
        return hashed == f"hashed_{plain}"

    def hash_password(self, plain: str) -> str:
        return f"hashed_{plain}"

    def create_token(self, user_id: object, ttl_minutes: int) -> str:
        return f"token_{user_id}"

    def validate_token(self, token: str) -> str | None:
        if not token.startswith("token_"):
            return None
        return token.removeprefix("token_")


class MockUserRepo:
    def __init__(self) -> None:
        self._users: dict[UUID, User] = {}

    def get_by_email(self, email: str) -> User | None:
        return next((u for u in self._users.values() if u.email == email.lower()), None)

    def get_by_id(self, user_id: UUID) -> User | None:
        return self._users.get(user_id)

    def save(self, user: User) -> User:
        self._users[user.id] = user
        return user

    def list_all(self) -> list[User]:
        return list(self._users.values())


class MockAccessRequestRepo:
    def __init__(self) -> None:
        self._requests: dict[UUID, AccessRequest] = {}

    def get_by_id(self, request_id: UUID) -> AccessRequest | None:
        return self._requests.get(request_id)

    def get_by_email(self, email: str) -> AccessRequest | None:
        return next((r for r in self._requests.values() if r.email == email.lower()), None)

    def save(self, request: AccessRequest) -> AccessRequest:
        self._requests[request.id] = request
        return request

    def delete(self, request_id: UUID) -> None:
        self._requests.pop(request_id, None)

    def list_all(self) -> list[AccessRequest]:
        return list(self._requests.values())


class MockLoginAttemptRepo:
    def __init__(self) -> None:
        self._attempts: dict[str, LoginAttempt] = {}

    def get(self, email: str) -> LoginAttempt | None:
        return self._attempts.get(email)

    def save(self, attempt: LoginAttempt) -> LoginAttempt:
        self._attempts[attempt.email] = attempt
        return attempt

    def delete(self, email: str) -> None:
        self._attempts.pop(email, None)


class MockSettingsRepo:
    def __init__(self, values: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def get_all(self) -> dict[str, str]:
        return dict(self._values)

    def set(self, key: str, value: str, updated_at: datetime) -> None:
        self._values[key] = value


class MockSystemLogRepo:
    def __init__(self) -> None:
        self.entries: list[SystemLog] = []

    def save(self, entry: SystemLog) -> SystemLog:
        self.entries.append(entry)
        return entry

    def list_recent(self, limit: int) -> list[SystemLog]:
        return sorted(self.entries, key=lambda e: e.timestamp, reverse=True)[:limit]

    def messages(self) -> list[str]:
        return [e.message for e in self.entries]


class MockCalculatorRepo:
    def __init__(self) -> None:
        self._records: dict[str, CalculatorRecord] = {}

    def get(self, calculator_id: str) -> CalculatorRecord | None:
        return self._records.get(calculator_id)

    def list_all(self) -> list[CalculatorRecord]:
        return sorted(self._records.values(), key=lambda r: (-r.usage_count, r.position))

    def save(self, record: CalculatorRecord) -> CalculatorRecord:
        self._records[record.id] = record
        return record

    def delete(self, calculator_id: str) -> bool:
        return self._records.pop(calculator_id, None) is not None

    def delete_all(self) -> None:
        self._records.clear()

    def increment_usage(self, calculator_id: str) -> bool:
        record = self._records.get(calculator_id)
        if record is None:
            return False
        record.usage_count += 1
        return True

    def count(self) -> int:
        return len(self._records)


class MockSavedCalculationRepo:
    def __init__(self) -> None:
        self._items: dict[UUID, SavedCalculation] = {}

    def save(self, calculation: SavedCalculation) -> SavedCalculation:
        self._items[calculation.id] = calculation
        return calculation

    def get(self, calculation_id: UUID) -> SavedCalculation | None:
        return self._items.get(calculation_id)

    def list_by_user(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[SavedCalculation]:
        items = [
            c
            for c in self._items.values()
            if c.user_id == user_id
            and (start is None or c.saved_at >= start)
            and (end is None or c.saved_at <= end)
        ]
        return sorted(items, key=lambda c: c.saved_at, reverse=True)

    def delete(self, calculation_id: UUID) -> None:
        self._items.pop(calculation_id, None)

    def delete_by_user(self, user_id: UUID) -> int:
        doomed = [k for k, c in self._items.items() if c.user_id == user_id]
        for k in doomed:
            del self._items[k]
        return len(doomed)


class MockGuestRepo:
    def __init__(self) -> None:
        self._sessions: dict[str, GuestSession] = {}
        self._calculations: list[GuestCalculation] = []

    def save_session(self, session: GuestSession) -> GuestSession:
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> GuestSession | None:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self.delete_calculations(session_id)

    def delete_idle_before(self, cutoff: datetime) -> int:
        idle = [s.id for s in self._sessions.values() if s.last_activity < cutoff]
        for session_id in idle:
            self.delete(session_id)
        return len(idle)

    def save_calculation(self, calculation: GuestCalculation) -> GuestCalculation:
        self._calculations.append(calculation)
        return calculation

    def list_calculations(self, session_id: str) -> list[GuestCalculation]:
        items = [c for c in self._calculations if c.session_id == session_id]
        return sorted(items, key=lambda c: c.saved_at, reverse=True)

    def count_calculations(self, session_id: str) -> int:
        return len(self.list_calculations(session_id))

    def delete_calculations(self, session_id: str) -> int:
        before = len(self._calculations)
        self._calculations = [c for c in self._calculations if c.session_id != session_id]
        return before - len(self._calculations)


# --- Fixtures ---


@pytest.fixture
def rules() -> Rules:
    # Tests run from the project root
    rules_path = Path("rules.yaml").resolve()
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)


@pytest.fixture
def policy(rules: Rules) -> PolicyEngine:
    return PolicyEngine(rules)


@pytest.fixture
def clock() -> MockTimePort:
    return MockTimePort()


@pytest.fixture
def auth_adapter() -> MockAuthAdapter:
    return MockAuthAdapter()


@pytest.fixture
def user_repo() -> MockUserRepo:
    return MockUserRepo()


@pytest.fixture
def request_repo() -> MockAccessRequestRepo:
    return MockAccessRequestRepo()


@pytest.fixture
def attempts_repo() -> MockLoginAttemptRepo:
    return MockLoginAttemptRepo()


@pytest.fixture
def settings_repo() -> MockSettingsRepo:
    return MockSettingsRepo()


@pytest.fixture
def log_repo() -> MockSystemLogRepo:
    return MockSystemLogRepo()


@pytest.fixture
def mailer() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def calculator_repo() -> MockCalculatorRepo:
    return MockCalculatorRepo()


@pytest.fixture
def saved_repo() -> MockSavedCalculationRepo:
    return MockSavedCalculationRepo()


@pytest.fixture
def guest_repo() -> MockGuestRepo:
    return MockGuestRepo()


def make_user(
    email: str = "user@example.com",
    *,
    role: str = "starter",
    status: str = "approved",
    password: str = "secret",
) -> User:
    return User(
        id=uuid4(),
        email=email,
        name=email.split("@")[0].title(),
        password_hash=f"hashed_{password}",
        role=role,  # type: ignore[arg-type]
        status=status,  # type: ignore[arg-type]
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def admin_user() -> User:
    return make_user("admin@example.com", role="admin")


@pytest.fixture
def starter_user() -> User:
    return make_user("starter@example.com")


# --- SQLite ---


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """A migrated, empty database."""
    path = os.path.join(str(tmp_path), "cgwise.db")
    SQLiteMigrator(path, "migrations").run_migrations()
    return path


@pytest.fixture
def user_factory():
    return make_user
