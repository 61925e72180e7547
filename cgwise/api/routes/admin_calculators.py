from dataclasses import asdict
from typing import Any, NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, status

from cgwise.adapters.clock import SystemClock
from cgwise.adapters.sqlite.repos import SQLiteCalculatorRepo
from cgwise.api.deps import get_calculator_repo, get_clock, get_current_user, get_policy
from cgwise.components.calculator import CalculatorValidationError
from cgwise.components.calculators import (
    CreateCalculatorInput,
    DeleteCalculatorInput,
    ListAllInput,
    ResetCatalogInput,
    UpdateCalculatorInput,
    run_create,
    run_delete,
    run_list_all,
    run_reset_to_defaults,
    run_update,
)
from cgwise.domain.entities import User
from cgwise.domain.policy import PolicyEngine

router = APIRouter()


def _raise_for_errors(errors: list[CalculatorValidationError]) -> NoReturn:
    codes = {e.code for e in errors}
    if "forbidden" in codes:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    if "not_found" in codes:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=errors[0].message)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST, detail=[asdict(e) for e in errors]
    )


@router.get("")
def list_all_calculators(
    current_user: User = Depends(get_current_user),
    repo: SQLiteCalculatorRepo = Depends(get_calculator_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> list[dict[str, Any]]:
    """Every calculator, enabled or not (admin only)."""
    result = run_list_all(ListAllInput(actor=current_user), repo=repo, policy=policy)
    if not result.success:
        _raise_for_errors(result.errors)
    return [r.to_json_dict() for r in result.records]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_calculator(
    body: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    repo: SQLiteCalculatorRepo = Depends(get_calculator_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    data = dict(body)
    enabled = bool(data.pop("enabled", True))
    result = run_create(
        CreateCalculatorInput(actor=current_user, data=data, enabled=enabled),
        repo=repo,
        policy=policy,
        time=clock,
    )
    if not result.success or result.record is None:
        _raise_for_errors(result.errors)
    return result.record.to_json_dict()


@router.patch("/{calculator_id}")
def update_calculator(
    calculator_id: str,
    body: dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    repo: SQLiteCalculatorRepo = Depends(get_calculator_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    updates = dict(body)
    enabled = updates.pop("enabled", None)
    result = run_update(
        UpdateCalculatorInput(
            actor=current_user,
            calculator_id=calculator_id,
            updates=updates,
            enabled=None if enabled is None else bool(enabled),
        ),
        repo=repo,
        policy=policy,
        time=clock,
    )
    if not result.success or result.record is None:
        _raise_for_errors(result.errors)
    return result.record.to_json_dict()


@router.delete("/{calculator_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_calculator(
    calculator_id: str,
    current_user: User = Depends(get_current_user),
    repo: SQLiteCalculatorRepo = Depends(get_calculator_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> None:
    result = run_delete(
        DeleteCalculatorInput(actor=current_user, calculator_id=calculator_id),
        repo=repo,
        policy=policy,
    )
    if not result.success:
        _raise_for_errors(result.errors)


@router.post("/reset")
def reset_calculators(
    current_user: User = Depends(get_current_user),
    repo: SQLiteCalculatorRepo = Depends(get_calculator_repo),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> list[dict[str, Any]]:
    """Drop every calculator (usage counts included) and restore the built-in set."""
    result = run_reset_to_defaults(
        ResetCatalogInput(actor=current_user), repo=repo, policy=policy, time=clock
    )
    if not result.success:
        _raise_for_errors(result.errors)
    return [r.to_json_dict() for r in result.records]
