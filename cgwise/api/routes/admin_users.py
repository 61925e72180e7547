from typing import NoReturn
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from cgwise.adapters.clock import SystemClock
from cgwise.adapters.sqlite.repos import SQLiteSystemLogRepo, SQLiteUserRepo
from cgwise.api.deps import get_clock, get_current_user, get_log_repo, get_policy, get_user_repo
from cgwise.api.schemas import UserResponse, UserUpdateRequest
from cgwise.components.access import (
    ListUsersInput,
    UpdateUserInput,
    run_list_users,
    run_update_user,
)
from cgwise.domain.entities import User
from cgwise.domain.policy import PolicyEngine

router = APIRouter()

_ERROR_STATUS = {"forbidden": 403, "not_found": 404}


def _raise(error: str | None, error_code: str | None) -> NoReturn:
    raise HTTPException(status_code=_ERROR_STATUS.get(error_code or "", 400), detail=error)


@router.get("", response_model=list[UserResponse])
def list_users(
    current_user: User = Depends(get_current_user),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> list[UserResponse]:
    """List all users (admin only)."""
    result = run_list_users(ListUsersInput(actor=current_user), user_repo=user_repo, policy=policy)
    if not result.success:
        raise HTTPException(status_code=403, detail=result.error or "Access denied")
    return [UserResponse.from_user(u, is_admin=policy.is_admin(u)) for u in result.users]


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: UUID,
    req: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    log_repo: SQLiteSystemLogRepo = Depends(get_log_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> UserResponse:
    """Change a user's role, status or profile (admin only)."""
    result = run_update_user(
        UpdateUserInput(actor=current_user, target_id=user_id, **req.model_dump()),
        user_repo=user_repo,
        log_repo=log_repo,
        policy=policy,
        time=clock,
    )
    if not result.success or result.user is None:
        _raise(result.error, result.error_code)
    return UserResponse.from_user(result.user, is_admin=policy.is_admin(result.user))
