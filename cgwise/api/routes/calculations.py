from datetime import datetime
from typing import NoReturn
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from cgwise.adapters.clock import SystemClock
from cgwise.adapters.sqlite.repos import SQLiteSavedCalculationRepo
from cgwise.api.deps import (
    get_catalog,
    get_clock,
    get_current_user,
    get_policy,
    get_saved_calculation_repo,
)
from cgwise.api.schemas import SaveCalculationRequest
from cgwise.components.calculators import PersistedCatalog
from cgwise.components.export import ExportPdfInput, run_export_pdf
from cgwise.components.history import (
    ClearCalculationsInput,
    DeleteCalculationInput,
    HistoryError,
    ListByDateInput,
    SaveCalculationInput,
    SavedCalculation,
    run_clear_all,
    run_delete,
    run_list_by_date,
    run_save,
)
from cgwise.domain.entities import User
from cgwise.domain.policy import PolicyEngine

router = APIRouter()

_ERROR_STATUS = {
    "forbidden": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
}


def _raise(error: HistoryError | None) -> NoReturn:
    code = _ERROR_STATUS.get(error.code if error else "", status.HTTP_400_BAD_REQUEST)
    raise HTTPException(status_code=code, detail=error.message if error else "Request failed")


@router.post("", response_model=SavedCalculation, status_code=status.HTTP_201_CREATED)
def save_calculation(
    req: SaveCalculationRequest,
    current_user: User = Depends(get_current_user),
    repo: SQLiteSavedCalculationRepo = Depends(get_saved_calculation_repo),
    catalog: PersistedCatalog = Depends(get_catalog),
    policy: PolicyEngine = Depends(get_policy),
    clock: SystemClock = Depends(get_clock),
) -> SavedCalculation:
    """Save a snapshot; the result is recomputed from the current calculator."""
    result = run_save(
        SaveCalculationInput(actor=current_user, **req.model_dump()),
        repo=repo,
        catalog=catalog,
        policy=policy,
        time=clock,
    )
    if not result.success or result.calculation is None:
        _raise(result.error)
    return result.calculation


@router.get("", response_model=list[SavedCalculation])
def list_calculations(
    start: datetime | None = None,
    end: datetime | None = None,
    current_user: User = Depends(get_current_user),
    repo: SQLiteSavedCalculationRepo = Depends(get_saved_calculation_repo),
) -> list[SavedCalculation]:
    """The caller's saved calculations, newest first, optionally bounded by save time."""
    result = run_list_by_date(
        ListByDateInput(actor=current_user, start=start, end=end), repo=repo
    )
    return result.calculations


@router.get("/export.pdf")
def export_calculations_pdf(
    start: datetime | None = None,
    end: datetime | None = None,
    current_user: User = Depends(get_current_user),
    repo: SQLiteSavedCalculationRepo = Depends(get_saved_calculation_repo),
    catalog: PersistedCatalog = Depends(get_catalog),
    clock: SystemClock = Depends(get_clock),
) -> Response:
    result = run_export_pdf(
        ExportPdfInput(actor=current_user, start=start, end=end),
        repo=repo,
        catalog=catalog,
        generated_at=clock.now_utc(),
    )
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.delete("/{calculation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_calculation(
    calculation_id: UUID,
    current_user: User = Depends(get_current_user),
    repo: SQLiteSavedCalculationRepo = Depends(get_saved_calculation_repo),
) -> None:
    result = run_delete(
        DeleteCalculationInput(actor=current_user, calculation_id=calculation_id), repo=repo
    )
    if not result.success:
        _raise(result.error)


@router.delete("")
def clear_calculations(
    current_user: User = Depends(get_current_user),
    repo: SQLiteSavedCalculationRepo = Depends(get_saved_calculation_repo),
) -> dict[str, int]:
    result = run_clear_all(ClearCalculationsInput(actor=current_user), repo=repo)
    return {"deleted": result.deleted}
