"""
Auth component - login with lockout, stateless sessions, preferences.

Login rules:
- maintenance mode admits only the super-admin
- admins are never locked out; their failed attempts are logged instead
- other accounts lock for ``lockout_minutes`` once failures reach the
  ``maxLoginAttempts`` setting, with a warning as the limit approaches
- a correct password still fails for accounts that are not approved
"""

import logging
import math
from datetime import timedelta
from uuid import UUID, uuid4

from cgwise.components.audit import SystemLogRepoPort, record_log
from cgwise.components.settings import (
    MAINTENANCE_MODE,
    MAX_LOGIN_ATTEMPTS,
    SettingsRepoPort,
    get_bool,
    get_int,
)
from cgwise.domain.entities import LoginAttempt, User
from cgwise.domain.policy import PolicyEngine

from .models import (
    AuthErrorCode,
    AuthOutput,
    CreateAdminInput,
    CreateSessionInput,
    LoginInput,
    UpdatePreferencesInput,
    UserOutput,
    VerifyTokenInput,
)
from .ports import (
    AccessRequestLookupPort,
    AuthAdapterPort,
    LoginAttemptRepoPort,
    TimePort,
    UserRepoPort,
)

logger = logging.getLogger(__name__)

MSG_MAINTENANCE = "System is currently under maintenance. Please try again later."
MSG_BAD_PASSWORD = "Invalid credentials. Please check your email and password."
MSG_UNKNOWN_USER = (
    "Invalid credentials or user not found. "
    "Please check your email and password or request access."
)
MSG_ACCOUNT_PENDING = "Your account is pending approval. Please wait for admin approval."
MSG_ACCOUNT_DENIED = "Your account access has been denied. Please contact support."
MSG_REQUEST_PENDING = "Your access request is pending approval. Please wait for admin review."


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def _locked_message(minutes_left: int) -> str:
    return (
        "Account is locked due to multiple failed login attempts. "
        f"Please try again in {_plural(minutes_left, 'minute')}."
    )


def _fail(error: str, code: AuthErrorCode) -> AuthOutput:
    return AuthOutput(success=False, error=error, error_code=code)


def _record_failure(
    email: str,
    error: str,
    *,
    is_admin: bool,
    attempts_repo: LoginAttemptRepoPort,
    log_repo: SystemLogRepoPort,
    settings_repo: SettingsRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> AuthOutput:
    if is_admin:
        record_log(
            log_repo,
            time,
            f"Admin user {email} failed login attempt (admins exempt from lockout)",
            user=email,
        )
        return _fail(error, "unauthorized")

    now = time.now_utc()
    max_attempts = get_int(settings_repo, MAX_LOGIN_ATTEMPTS)
    lockout = policy.rules.auth.lockout

    attempt = attempts_repo.get(email) or LoginAttempt(email=email, attempts=0)
    attempt.attempts += 1
    attempt.last_attempt = now

    if attempt.attempts >= max_attempts:
        attempt.locked_until = now + timedelta(minutes=lockout.lockout_minutes)
        attempts_repo.save(attempt)
        record_log(
            log_repo,
            time,
            f"Account {email} locked for {lockout.lockout_minutes} minutes "
            f"after {max_attempts} failed login attempts",
            user=email,
            log_type="warning",
        )
        return _fail(
            "Too many failed login attempts. "
            f"Account locked for {lockout.lockout_minutes} minutes.",
            "locked",
        )

    attempts_repo.save(attempt)
    remaining = max_attempts - attempt.attempts
    if 0 < remaining <= lockout.warn_when_remaining_at_most:
        error = (
            f"{error}\n\nWarning: {_plural(remaining, 'attempt')} "
            "remaining before account lockout."
        )
    return _fail(error, "unauthorized")


def run_login(
    inp: LoginInput,
    *,
    user_repo: UserRepoPort,
    request_repo: AccessRequestLookupPort,
    attempts_repo: LoginAttemptRepoPort,
    settings_repo: SettingsRepoPort,
    log_repo: SystemLogRepoPort,
    auth_adapter: AuthAdapterPort,
    policy: PolicyEngine,
    time: TimePort,
) -> AuthOutput:
    email = inp.email.strip().lower()

    if get_bool(settings_repo, MAINTENANCE_MODE) and not policy.is_super_admin(email):
        return _fail(MSG_MAINTENANCE, "forbidden")

    user = user_repo.get_by_email(email)
    is_admin = policy.is_super_admin(email) or (user is not None and user.role == "admin")
    now = time.now_utc()

    if not is_admin:
        attempt = attempts_repo.get(email)
        if attempt and attempt.locked_until:
            if attempt.locked_until > now:
                seconds_left = (attempt.locked_until - now).total_seconds()
                return _fail(_locked_message(math.ceil(seconds_left / 60)), "locked")
            # Lock expired
            attempt.attempts = 0
            attempt.locked_until = None
            attempts_repo.save(attempt)

    def failure(error: str) -> AuthOutput:
        return _record_failure(
            email,
            error,
            is_admin=is_admin,
            attempts_repo=attempts_repo,
            log_repo=log_repo,
            settings_repo=settings_repo,
            policy=policy,
            time=time,
        )

    if user is not None:
        if not auth_adapter.verify_password(inp.password, user.password_hash):
            return failure(MSG_BAD_PASSWORD)

        if user.status == "approved":
            user.last_login = now
            user_repo.save(user)
            if not is_admin:
                attempts_repo.delete(email)
            logger.info("User %s logged in", email)
            return AuthOutput(user=user, success=True)
        if user.status == "pending":
            return _fail(MSG_ACCOUNT_PENDING, "forbidden")
        return _fail(MSG_ACCOUNT_DENIED, "forbidden")

    if request_repo.get_by_email(email) is not None:
        return _fail(MSG_REQUEST_PENDING, "forbidden")

    return failure(MSG_UNKNOWN_USER)


def run_create_session(
    inp: CreateSessionInput,
    *,
    auth_adapter: AuthAdapterPort,
    ttl_minutes: int,
) -> AuthOutput:
    token = auth_adapter.create_token(inp.user.id, ttl_minutes)
    return AuthOutput(user=inp.user, token_raw=token, success=True)


def run_verify_token(
    inp: VerifyTokenInput,
    *,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
) -> AuthOutput:
    subject = auth_adapter.validate_token(inp.token)
    if subject is None:
        return _fail("Invalid token", "unauthorized")

    try:
        user_id = UUID(str(subject))
    except ValueError:
        return _fail("Invalid token payload", "unauthorized")

    user = user_repo.get_by_id(user_id)
    if not user:
        return _fail("User not found", "unauthorized")

    # Suspension takes effect on the next request, not at token expiry
    if user.status != "approved":
        return _fail(MSG_ACCOUNT_DENIED, "forbidden")

    return AuthOutput(user=user, success=True)


def run_update_preferences(
    inp: UpdatePreferencesInput,
    *,
    user_repo: UserRepoPort,
) -> UserOutput:
    user = user_repo.get_by_id(inp.actor.id)
    if not user:
        return UserOutput(success=False, error="User not found")

    if inp.unit_preference is not None:
        user.unit_preference = inp.unit_preference
    if inp.theme_preference is not None:
        user.theme_preference = inp.theme_preference
    if inp.colorblind_mode is not None:
        user.colorblind_mode = inp.colorblind_mode
    if inp.font_size is not None:
        user.font_size = inp.font_size

    user_repo.save(user)
    return UserOutput(user=user, success=True)


def run_create_admin(
    inp: CreateAdminInput,
    *,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    policy: PolicyEngine,
    time: TimePort,
) -> UserOutput:
    """Create an approved admin, or promote and reset the password of an existing account."""
    email = inp.email.strip().lower()
    if len(inp.password) < policy.rules.auth.password_hashing.min_length:
        return UserOutput(success=False, error="Password too short")

    user = user_repo.get_by_email(email)
    if user is None:
        user = User(
            id=uuid4(),
            email=email,
            name=inp.name,
            password_hash="",
            created_at=time.now_utc(),
        )
    user.role = "admin"
    user.status = "approved"
    user.password_hash = auth_adapter.hash_password(inp.password)
    user_repo.save(user)
    logger.info("Admin account ready: %s", email)
    return UserOutput(user=user, success=True)
