from typing import NoReturn
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from cgwise.adapters.clock import SystemClock
from cgwise.adapters.dev_email import DevEmailAdapter
from cgwise.adapters.sqlite.repos import (
    SQLiteAccessRequestRepo,
    SQLiteSystemLogRepo,
    SQLiteUserRepo,
)
from cgwise.api.deps import (
    get_access_request_repo,
    get_clock,
    get_current_user,
    get_log_repo,
    get_mailer,
    get_policy,
    get_user_repo,
)
from cgwise.api.schemas import AccessRequestResponse, ApproveRequest, RejectRequest, UserResponse
from cgwise.components.access import (
    ApproveRequestInput,
    ListRequestsInput,
    RejectRequestInput,
    run_approve,
    run_list_requests,
    run_reject,
)
from cgwise.domain.entities import User
from cgwise.domain.policy import PolicyEngine

router = APIRouter()

_ERROR_STATUS = {"forbidden": 403, "not_found": 404, "conflict": 409}


def _raise(error: str | None, error_code: str | None) -> NoReturn:
    raise HTTPException(status_code=_ERROR_STATUS.get(error_code or "", 400), detail=error)


@router.get("", response_model=list[AccessRequestResponse])
def list_requests(
    current_user: User = Depends(get_current_user),
    request_repo: SQLiteAccessRequestRepo = Depends(get_access_request_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> list[AccessRequestResponse]:
    """Pending access requests, newest first (admin only)."""
    result = run_list_requests(
        ListRequestsInput(actor=current_user), request_repo=request_repo, policy=policy
    )
    if not result.success:
        raise HTTPException(status_code=403, detail=result.error or "Access denied")
    return [AccessRequestResponse.from_request(r) for r in result.requests]


@router.post("/{request_id}/approve", response_model=UserResponse)
def approve_request(
    request_id: UUID,
    req: ApproveRequest,
    current_user: User = Depends(get_current_user),
    request_repo: SQLiteAccessRequestRepo = Depends(get_access_request_repo),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    mailer: DevEmailAdapter = Depends(get_mailer),
    log_repo: SQLiteSystemLogRepo = Depends(get_log_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> UserResponse:
    result = run_approve(
        ApproveRequestInput(actor=current_user, request_id=request_id, role=req.role),
        request_repo=request_repo,
        user_repo=user_repo,
        mailer=mailer,
        log_repo=log_repo,
        policy=policy,
        time=clock,
    )
    if not result.success or result.user is None:
        _raise(result.error, result.error_code)
    return UserResponse.from_user(result.user, is_admin=policy.is_admin(result.user))


@router.post("/{request_id}/reject", response_model=AccessRequestResponse)
def reject_request(
    request_id: UUID,
    req: RejectRequest,
    current_user: User = Depends(get_current_user),
    request_repo: SQLiteAccessRequestRepo = Depends(get_access_request_repo),
    mailer: DevEmailAdapter = Depends(get_mailer),
    log_repo: SQLiteSystemLogRepo = Depends(get_log_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> AccessRequestResponse:
    result = run_reject(
        RejectRequestInput(actor=current_user, request_id=request_id, reason=req.reason),
        request_repo=request_repo,
        mailer=mailer,
        log_repo=log_repo,
        policy=policy,
        time=clock,
    )
    if not result.success or result.request is None:
        _raise(result.error, result.error_code)
    return AccessRequestResponse.from_request(result.request)
