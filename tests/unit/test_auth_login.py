"""
Tests for the auth component: login, lockout, tokens, preferences, admin bootstrap.
"""

import pytest

from cgwise.components.auth import (
    CreateAdminInput,
    CreateSessionInput,
    LoginInput,
    UpdatePreferencesInput,
    VerifyTokenInput,
    run_create_admin,
    run_create_session,
    run_login,
    run_update_preferences,
    run_verify_token,
)
from cgwise.components.auth.component import (
    MSG_ACCOUNT_DENIED,
    MSG_ACCOUNT_PENDING,
    MSG_BAD_PASSWORD,
    MSG_MAINTENANCE,
    MSG_REQUEST_PENDING,
    MSG_UNKNOWN_USER,
)
from cgwise.components.settings import MAINTENANCE_MODE, MAX_LOGIN_ATTEMPTS
from cgwise.domain.entities import AccessRequest

SUPER_ADMIN = "dolevb@cgwheels.com"


@pytest.fixture
def login(
    user_repo, request_repo, attempts_repo, settings_repo, log_repo, auth_adapter, policy, clock
):
    def _login(email: str, password: str):
        return run_login(
            LoginInput(email=email, password=password),
            user_repo=user_repo,
            request_repo=request_repo,
            attempts_repo=attempts_repo,
            settings_repo=settings_repo,
            log_repo=log_repo,
            auth_adapter=auth_adapter,
            policy=policy,
            time=clock,
        )

    return _login


class TestLogin:
    def test_success(self, login, user_repo, starter_user, clock) -> None:
        user_repo.save(starter_user)
        result = login("Starter@Example.com ", "secret")
        assert result.success
        assert result.user is not None
        assert result.user.last_login == clock.now_utc()

    def test_wrong_password(self, login, user_repo, starter_user) -> None:
        user_repo.save(starter_user)
        result = login(starter_user.email, "nope")
        assert not result.success
        assert result.error == MSG_BAD_PASSWORD
        assert result.error_code == "unauthorized"

    def test_unknown_user(self, login, attempts_repo) -> None:
        result = login("ghost@example.com", "x")
        assert result.error == MSG_UNKNOWN_USER
        attempt = attempts_repo.get("ghost@example.com")
        assert attempt is not None and attempt.attempts == 1

    def test_pending_request(self, login, request_repo) -> None:
        request_repo.save(
            AccessRequest(
                email="wait@example.com",
                name="Wait",
                password_hash="hashed_pw",
                company="Acme",
                position="Engineer",
                country="IL",
            )
        )
        result = login("wait@example.com", "pw")
        assert result.error == MSG_REQUEST_PENDING
        assert result.error_code == "forbidden"

    def test_pending_account(self, login, user_repo, user_factory) -> None:
        user_repo.save(user_factory("p@example.com", status="pending"))
        result = login("p@example.com", "secret")
        assert result.error == MSG_ACCOUNT_PENDING
        assert result.error_code == "forbidden"

    @pytest.mark.parametrize("status", ["rejected", "suspended"])
    def test_denied_account(self, login, user_repo, user_factory, status) -> None:
        user_repo.save(user_factory("d@example.com", status=status))
        result = login("d@example.com", "secret")
        assert result.error == MSG_ACCOUNT_DENIED

    def test_maintenance_blocks_everyone_but_super_admin(
        self, login, user_repo, settings_repo, clock, starter_user, user_factory
    ) -> None:
        settings_repo.set(MAINTENANCE_MODE, "true", clock.now_utc())
        user_repo.save(starter_user)
        user_repo.save(user_factory(SUPER_ADMIN, role="admin", password="boss"))

        blocked = login(starter_user.email, "secret")
        assert blocked.error == MSG_MAINTENANCE
        assert blocked.error_code == "forbidden"

        assert login(SUPER_ADMIN, "boss").success


class TestLockout:
    def test_warning_then_lock(self, login, user_repo, starter_user, log_repo) -> None:
        user_repo.save(starter_user)
        email = starter_user.email

        assert login(email, "bad").error == MSG_BAD_PASSWORD
        assert login(email, "bad").error == MSG_BAD_PASSWORD
        third = login(email, "bad")
        assert third.error is not None
        assert third.error.endswith(
            "\n\nWarning: 2 attempts remaining before account lockout."
        )
        fourth = login(email, "bad")
        assert fourth.error is not None
        assert fourth.error.endswith("Warning: 1 attempt remaining before account lockout.")

        fifth = login(email, "bad")
        assert fifth.error_code == "locked"
        assert fifth.error == "Too many failed login attempts. Account locked for 15 minutes."
        assert any("locked" in m for m in log_repo.messages())

    def test_locked_rejects_correct_password(
        self, login, user_repo, starter_user, attempts_repo, clock
    ) -> None:
        user_repo.save(starter_user)
        for _ in range(5):
            login(starter_user.email, "bad")

        result = login(starter_user.email, "secret")
        assert result.error_code == "locked"
        assert result.error is not None
        assert "15 minutes" in result.error

        clock.advance(minutes=14, seconds=30)
        result = login(starter_user.email, "secret")
        assert result.error is not None
        assert "1 minute." in result.error

    def test_lock_expires(self, login, user_repo, starter_user, attempts_repo, clock) -> None:
        user_repo.save(starter_user)
        for _ in range(5):
            login(starter_user.email, "bad")

        clock.advance(minutes=16)
        assert login(starter_user.email, "secret").success
        assert attempts_repo.get(starter_user.email) is None

    def test_success_clears_counter(self, login, user_repo, starter_user, attempts_repo) -> None:
        user_repo.save(starter_user)
        login(starter_user.email, "bad")
        assert attempts_repo.get(starter_user.email) is not None
        assert login(starter_user.email, "secret").success
        assert attempts_repo.get(starter_user.email) is None

    def test_limit_follows_setting(
        self, login, user_repo, starter_user, settings_repo, clock
    ) -> None:
        settings_repo.set(MAX_LOGIN_ATTEMPTS, "2", clock.now_utc())
        user_repo.save(starter_user)
        first = login(starter_user.email, "bad")
        assert first.error is not None and "1 attempt remaining" in first.error
        assert login(starter_user.email, "bad").error_code == "locked"

    def test_admin_never_locked(
        self, login, user_repo, admin_user, attempts_repo, log_repo
    ) -> None:
        user_repo.save(admin_user)
        for _ in range(10):
            result = login(admin_user.email, "bad")
            assert result.error == MSG_BAD_PASSWORD
        assert attempts_repo.get(admin_user.email) is None
        assert len(log_repo.entries) == 10
        assert login(admin_user.email, "secret").success


class TestTokens:
    def test_create_and_verify(self, user_repo, auth_adapter, starter_user) -> None:
        user_repo.save(starter_user)
        session = run_create_session(
            CreateSessionInput(user=starter_user), auth_adapter=auth_adapter, ttl_minutes=60
        )
        assert session.token_raw == f"token_{starter_user.id}"

        verified = run_verify_token(
            VerifyTokenInput(token=session.token_raw),
            user_repo=user_repo,
            auth_adapter=auth_adapter,
        )
        assert verified.success
        assert verified.user == starter_user

    def test_invalid_token(self, user_repo, auth_adapter) -> None:
        result = run_verify_token(
            VerifyTokenInput(token="garbage"), user_repo=user_repo, auth_adapter=auth_adapter
        )
        assert result.error_code == "unauthorized"

    def test_non_uuid_subject(self, user_repo, auth_adapter) -> None:
        result = run_verify_token(
            VerifyTokenInput(token="token_42"), user_repo=user_repo, auth_adapter=auth_adapter
        )
        assert result.error == "Invalid token payload"

    def test_suspended_user_rejected(
        self, user_repo, auth_adapter, user_factory
    ) -> None:
        user = user_repo.save(user_factory("s@example.com", status="suspended"))
        result = run_verify_token(
            VerifyTokenInput(token=f"token_{user.id}"),
            user_repo=user_repo,
            auth_adapter=auth_adapter,
        )
        assert result.error_code == "forbidden"


class TestPreferences:
    def test_partial_update(self, user_repo, starter_user) -> None:
        user_repo.save(starter_user)
        result = run_update_preferences(
            UpdatePreferencesInput(actor=starter_user, unit_preference="imperial", font_size="large"),
            user_repo=user_repo,
        )
        assert result.success
        assert result.user is not None
        assert result.user.unit_preference == "imperial"
        assert result.user.font_size == "large"
        assert result.user.theme_preference is None

    def test_missing_user(self, user_repo, starter_user) -> None:
        result = run_update_preferences(
            UpdatePreferencesInput(actor=starter_user, theme_preference="dark"),
            user_repo=user_repo,
        )
        assert not result.success


class TestCreateAdmin:
    def test_creates_new_admin(self, user_repo, auth_adapter, policy, clock) -> None:
        result = run_create_admin(
            CreateAdminInput(email="Root@Example.com", name="Root", password="pw"),
            user_repo=user_repo,
            auth_adapter=auth_adapter,
            policy=policy,
            time=clock,
        )
        assert result.success
        user = user_repo.get_by_email("root@example.com")
        assert user is not None
        assert user.role == "admin"
        assert user.status == "approved"
        assert user.password_hash == "hashed_pw"

    def test_promotes_existing(self, user_repo, auth_adapter, policy, clock, user_factory) -> None:
        existing = user_repo.save(user_factory("x@example.com", status="suspended"))
        run_create_admin(
            CreateAdminInput(email="x@example.com", name="X", password="new"),
            user_repo=user_repo,
            auth_adapter=auth_adapter,
            policy=policy,
            time=clock,
        )
        promoted = user_repo.get_by_id(existing.id)
        assert promoted is not None
        assert promoted.role == "admin"
        assert promoted.status == "approved"
        assert promoted.password_hash == "hashed_new"

    def test_empty_password_rejected(self, user_repo, auth_adapter, policy, clock) -> None:
        result = run_create_admin(
            CreateAdminInput(email="y@example.com", name="Y", password=""),
            user_repo=user_repo,
            auth_adapter=auth_adapter,
            policy=policy,
            time=clock,
        )
        assert not result.success
        assert user_repo.list_all() == []
