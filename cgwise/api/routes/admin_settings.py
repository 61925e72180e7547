from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from cgwise.adapters.clock import SystemClock
from cgwise.adapters.sqlite.repos import SQLiteSettingsRepo
from cgwise.api.deps import get_clock, get_current_user, get_policy, get_settings_repo
from cgwise.api.schemas import SettingUpdateRequest
from cgwise.components.settings import (
    GetSettingsInput,
    UpdateSettingInput,
    run_get,
    run_update,
)
from cgwise.domain.entities import User
from cgwise.domain.policy import PolicyEngine

router = APIRouter()


@router.get("")
def get_settings(
    current_user: User = Depends(get_current_user),
    repo: SQLiteSettingsRepo = Depends(get_settings_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> dict[str, Any]:
    if not policy.can_manage_settings(current_user):
        raise HTTPException(status_code=403, detail="Access denied")
    return dict(run_get(GetSettingsInput(), repo=repo).settings)


@router.put("/{key}")
def update_setting(
    key: str,
    req: SettingUpdateRequest,
    current_user: User = Depends(get_current_user),
    repo: SQLiteSettingsRepo = Depends(get_settings_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_update(
        UpdateSettingInput(actor=current_user, key=key, value=req.value),
        repo=repo,
        policy=policy,
        time=clock,
    )
    if not result.success:
        if any(e.code == "forbidden" for e in result.errors):
            raise HTTPException(status_code=403, detail="Access denied")
        raise HTTPException(status_code=400, detail=[asdict(e) for e in result.errors])
    return dict(result.settings)
