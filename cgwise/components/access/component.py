"""
Access component - access requests, approval and user administration.

New accounts start as access requests. An admin approves a request (which
creates an approved user with the requested password) or rejects it (which
removes it). Each step records a mail to the requester and a system log row.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from cgwise.components.audit import MailerPort, SystemLogRepoPort, record_email, record_log
from cgwise.domain.entities import ROLES, USER_STATUSES, AccessRequest, User
from cgwise.domain.policy import PolicyEngine

from . import emails
from .models import (
    AccessRequestOutput,
    AccessValidationError,
    ApproveRequestInput,
    ListRequestsInput,
    ListUsersInput,
    RejectRequestInput,
    RequestAccessInput,
    RequestListOutput,
    UpdateUserInput,
    UpgradeGuestInput,
    UserListOutput,
    UserOutput,
)
from .ports import (
    AccessRequestRepoPort,
    GuestSessionPort,
    PasswordHasherPort,
    TimePort,
    UserRepoPort,
)

logger = logging.getLogger(__name__)

MSG_REQUEST_EXISTS = "A request with this email already exists"
MSG_USER_EXISTS = "A user with this email already exists"
MSG_REQUEST_NOT_FOUND = "Access request not found"
MSG_NO_UPDATES = "No valid updates provided"


# --- Validation ---


def _validate_request(
    inp: RequestAccessInput | UpgradeGuestInput, min_password_length: int
) -> list[AccessValidationError]:
    errors: list[AccessValidationError] = []

    email = inp.email.strip()
    local, at, domain = email.partition("@")
    if not (local and at and "." in domain):
        errors.append(
            AccessValidationError(field="email", code="invalid_email", message="Invalid email")
        )

    for name in ("name", "company", "position", "country"):
        if not getattr(inp, name).strip():
            errors.append(
                AccessValidationError(
                    field=name, code="required", message=f"Field '{name}' is required"
                )
            )

    if len(inp.password) < max(1, min_password_length):
        errors.append(
            AccessValidationError(
                field="password",
                code="min_length",
                message=f"Password must be at least {max(1, min_password_length)} characters",
            )
        )
    return errors


def _submit(
    inp: RequestAccessInput | UpgradeGuestInput,
    *,
    upgrade: bool,
    request_repo: AccessRequestRepoPort,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
    mailer: MailerPort,
    log_repo: SystemLogRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> AccessRequestOutput:
    errors = _validate_request(inp, policy.rules.auth.password_hashing.min_length)
    if errors:
        return AccessRequestOutput(errors=errors, success=False, error_code="invalid")

    email = inp.email.strip().lower()
    if request_repo.get_by_email(email) is not None:
        return AccessRequestOutput(success=False, error=MSG_REQUEST_EXISTS, error_code="conflict")
    if user_repo.get_by_email(email) is not None:
        return AccessRequestOutput(success=False, error=MSG_USER_EXISTS, error_code="conflict")

    request = AccessRequest(
        id=uuid4(),
        email=email,
        name=inp.name.strip(),
        password_hash=hasher.hash_password(inp.password),
        company=inp.company.strip(),
        position=inp.position.strip(),
        country=inp.country.strip(),
        preferred_units=inp.preferred_units,
        created_at=time.now_utc(),
    )
    request_repo.save(request)

    mail = policy.rules.mail
    subject, body = emails.request_received(request, upgrade=upgrade)
    record_email(
        mailer,
        time,
        from_email=mail.from_address,
        to_email=request.email,
        subject=subject,
        body=body,
        email_type="request",
    )
    subject, body = emails.admin_notification(request, upgrade=upgrade)
    record_email(
        mailer,
        time,
        from_email=mail.from_address,
        to_email=mail.admin_inbox,
        subject=subject,
        body=body,
        email_type="request",
    )

    action = "requested account upgrade" if upgrade else "requested access"
    record_log(
        log_repo,
        time,
        f"User {request.name} ({request.email}) from {request.company} {action} "
        "- Confirmation emails sent",
        user=request.email,
    )
    return AccessRequestOutput(request=request)


# --- Component Entry Points ---


def run_request_access(
    inp: RequestAccessInput,
    *,
    request_repo: AccessRequestRepoPort,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
    mailer: MailerPort,
    log_repo: SystemLogRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> AccessRequestOutput:
    return _submit(
        inp,
        upgrade=False,
        request_repo=request_repo,
        user_repo=user_repo,
        hasher=hasher,
        mailer=mailer,
        log_repo=log_repo,
        policy=policy,
        time=time,
    )


def run_upgrade_guest(
    inp: UpgradeGuestInput,
    *,
    request_repo: AccessRequestRepoPort,
    user_repo: UserRepoPort,
    guest_repo: GuestSessionPort,
    hasher: PasswordHasherPort,
    mailer: MailerPort,
    log_repo: SystemLogRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> AccessRequestOutput:
    """
    Submit an access request on behalf of a guest.

    The guest's session, if given, is retired once the request is stored;
    the number of calculations it held is noted in the system log.
    """
    result = _submit(
        inp,
        upgrade=True,
        request_repo=request_repo,
        user_repo=user_repo,
        hasher=hasher,
        mailer=mailer,
        log_repo=log_repo,
        policy=policy,
        time=time,
    )
    if not result.success or not inp.guest_session_id:
        return result

    session = guest_repo.get(inp.guest_session_id)
    if session is None:
        return result

    count = guest_repo.count_calculations(session.id)
    if count > 0:
        record_log(
            log_repo,
            time,
            f"Guest user {inp.name} ({inp.email}) upgraded to account request "
            f"with {count} existing calculations",
            user=inp.email.strip().lower(),
        )
    guest_repo.delete(session.id)
    return result


def run_list_requests(
    inp: ListRequestsInput, *, request_repo: AccessRequestRepoPort, policy: PolicyEngine
) -> RequestListOutput:
    if not policy.can_manage_users(inp.actor):
        return RequestListOutput(success=False, error="Access denied")
    requests = sorted(request_repo.list_all(), key=lambda r: r.created_at, reverse=True)
    return RequestListOutput(requests=requests)


def run_approve(
    inp: ApproveRequestInput,
    *,
    request_repo: AccessRequestRepoPort,
    user_repo: UserRepoPort,
    mailer: MailerPort,
    log_repo: SystemLogRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> UserOutput:
    if not policy.can_manage_users(inp.actor):
        return UserOutput(success=False, error="Access denied", error_code="forbidden")

    if inp.role not in ROLES:
        return UserOutput(success=False, error=f"Invalid role '{inp.role}'", error_code="invalid")

    request = request_repo.get_by_id(inp.request_id)
    if request is None:
        return UserOutput(success=False, error=MSG_REQUEST_NOT_FOUND, error_code="not_found")

    if user_repo.get_by_email(request.email) is not None:
        return UserOutput(success=False, error=MSG_USER_EXISTS, error_code="conflict")

    user = User(
        id=uuid4(),
        email=request.email,
        name=request.name,
        password_hash=request.password_hash,
        role=inp.role,
        status="approved",
        unit_preference=request.preferred_units,
        company=request.company,
        position=request.position,
        country=request.country,
        created_at=time.now_utc(),
    )
    user_repo.save(user)
    request_repo.delete(request.id)

    subject, body = emails.approved(request, inp.role)
    record_email(
        mailer,
        time,
        from_email=policy.rules.mail.from_address,
        to_email=request.email,
        subject=subject,
        body=body,
        email_type="approval",
    )
    record_log(
        log_repo,
        time,
        f"Access request approved for {request.name} ({request.email}) with role {inp.role}",
        user=inp.actor.email,
    )
    return UserOutput(user=user)


def run_reject(
    inp: RejectRequestInput,
    *,
    request_repo: AccessRequestRepoPort,
    mailer: MailerPort,
    log_repo: SystemLogRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> AccessRequestOutput:
    if not policy.can_manage_users(inp.actor):
        return AccessRequestOutput(success=False, error="Access denied", error_code="forbidden")

    request = request_repo.get_by_id(inp.request_id)
    if request is None:
        return AccessRequestOutput(
            success=False, error=MSG_REQUEST_NOT_FOUND, error_code="not_found"
        )

    request_repo.delete(request.id)

    reason = (inp.reason or "").strip() or None
    subject, body = emails.rejected(request, reason)
    record_email(
        mailer,
        time,
        from_email=policy.rules.mail.from_address,
        to_email=request.email,
        subject=subject,
        body=body,
        email_type="rejection",
    )
    suffix = f" - Reason: {reason}" if reason else ""
    record_log(
        log_repo,
        time,
        f"Access request rejected for {request.name} ({request.email}){suffix}",
        user=inp.actor.email,
    )
    return AccessRequestOutput(request=request)


def run_list_users(
    inp: ListUsersInput, *, user_repo: UserRepoPort, policy: PolicyEngine
) -> UserListOutput:
    if not policy.can_manage_users(inp.actor):
        return UserListOutput(success=False, error="Access denied")
    users = sorted(user_repo.list_all(), key=lambda u: u.created_at, reverse=True)
    return UserListOutput(users=users)


def run_update_user(
    inp: UpdateUserInput,
    *,
    user_repo: UserRepoPort,
    log_repo: SystemLogRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> UserOutput:
    if not policy.can_manage_users(inp.actor):
        return UserOutput(success=False, error="Access denied", error_code="forbidden")

    target = user_repo.get_by_id(inp.target_id)
    if not target:
        return UserOutput(success=False, error="User not found", error_code="not_found")

    updates = {
        name: value
        for name in ("name", "role", "status", "company", "position", "country")
        if (value := getattr(inp, name)) is not None
    }
    if not updates:
        return UserOutput(success=False, error=MSG_NO_UPDATES, error_code="invalid")

    if "role" in updates and updates["role"] not in ROLES:
        return UserOutput(success=False, error="Invalid role", error_code="invalid")
    if "status" in updates and updates["status"] not in USER_STATUSES:
        return UserOutput(success=False, error="Invalid status", error_code="invalid")

    # Self-lockout check
    if target.id == inp.actor.id:
        if updates.get("role", "admin") != "admin":
            return UserOutput(
                success=False,
                error="Cannot remove admin role from yourself",
                error_code="invalid",
            )
        if updates.get("status", "approved") != "approved":
            return UserOutput(
                success=False, error="Cannot suspend yourself", error_code="invalid"
            )

    for name, value in updates.items():
        setattr(target, name, value)
    user_repo.save(target)

    changed = ", ".join(f"{k}={v}" for k, v in updates.items())
    record_log(log_repo, time, f"User {target.email} updated: {changed}", user=inp.actor.email)
    return UserOutput(user=target)
