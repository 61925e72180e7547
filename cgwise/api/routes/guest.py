from typing import Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, status

from cgwise.adapters.clock import SystemClock
from cgwise.adapters.sqlite.repos import SQLiteGuestRepo, SQLiteSettingsRepo
from cgwise.api.deps import get_catalog, get_clock, get_guest_repo, get_settings_repo
from cgwise.api.schemas import GuestCalculationRequest, GuestSessionResponse
from cgwise.components.calculators import PersistedCatalog
from cgwise.components.history import (
    CreateGuestSessionInput,
    GuestSessionInput,
    HistoryError,
    SaveGuestCalculationInput,
    run_clear_guest_calculations,
    run_create_guest_session,
    run_get_guest_session,
    run_list_guest_calculations,
    run_save_guest_calculation,
)

router = APIRouter()

_ERROR_STATUS = {
    "forbidden": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "limit_reached": status.HTTP_403_FORBIDDEN,
}


def _raise(error: HistoryError | None) -> NoReturn:
    code = _ERROR_STATUS.get(error.code if error else "", status.HTTP_400_BAD_REQUEST)
    raise HTTPException(status_code=code, detail=error.message if error else "Request failed")


@router.post(
    "/sessions", response_model=GuestSessionResponse, status_code=status.HTTP_201_CREATED
)
def create_session(
    repo: SQLiteGuestRepo = Depends(get_guest_repo),
    settings_repo: SQLiteSettingsRepo = Depends(get_settings_repo),
    clock: SystemClock = Depends(get_clock),
) -> GuestSessionResponse:
    result = run_create_guest_session(
        CreateGuestSessionInput(), repo=repo, settings_repo=settings_repo, time=clock
    )
    if not result.success or result.session is None:
        _raise(result.error)
    return GuestSessionResponse.from_session(result.session)


@router.get("/sessions/{session_id}", response_model=GuestSessionResponse)
def get_session(
    session_id: str,
    repo: SQLiteGuestRepo = Depends(get_guest_repo),
    clock: SystemClock = Depends(get_clock),
) -> GuestSessionResponse:
    result = run_get_guest_session(GuestSessionInput(session_id=session_id), repo=repo, time=clock)
    if not result.success or result.session is None:
        _raise(result.error)
    return GuestSessionResponse.from_session(result.session)


@router.post("/sessions/{session_id}/calculations", status_code=status.HTTP_201_CREATED)
def save_guest_calculation(
    session_id: str,
    req: GuestCalculationRequest,
    repo: SQLiteGuestRepo = Depends(get_guest_repo),
    catalog: PersistedCatalog = Depends(get_catalog),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_save_guest_calculation(
        SaveGuestCalculationInput(session_id=session_id, **req.model_dump()),
        repo=repo,
        catalog=catalog,
        time=clock,
    )
    if not result.success or result.calculation is None or result.session is None:
        _raise(result.error)
    return {
        "calculation": result.calculation.model_dump(mode="json"),
        "session": GuestSessionResponse.from_session(result.session).model_dump(mode="json"),
    }


@router.get("/sessions/{session_id}/calculations")
def list_guest_calculations(
    session_id: str,
    repo: SQLiteGuestRepo = Depends(get_guest_repo),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    result = run_list_guest_calculations(
        GuestSessionInput(session_id=session_id), repo=repo, time=clock
    )
    if not result.success or result.session is None:
        _raise(result.error)
    return {
        "calculations": [c.model_dump(mode="json") for c in result.calculations],
        "session": GuestSessionResponse.from_session(result.session).model_dump(mode="json"),
    }


@router.delete("/sessions/{session_id}/calculations", response_model=GuestSessionResponse)
def clear_guest_calculations(
    session_id: str,
    repo: SQLiteGuestRepo = Depends(get_guest_repo),
    clock: SystemClock = Depends(get_clock),
) -> GuestSessionResponse:
    result = run_clear_guest_calculations(
        GuestSessionInput(session_id=session_id), repo=repo, time=clock
    )
    if not result.success or result.session is None:
        _raise(result.error)
    return GuestSessionResponse.from_session(result.session)
