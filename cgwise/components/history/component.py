"""
History component - saved calculations for members, capped history for guests.

Saved entries are snapshots: the result is computed once, at save time,
from the calculator as it was then. Only inputs that carry data (non-zero)
are kept in the snapshot.
"""

from __future__ import annotations

import logging
import math
from datetime import timedelta

from cgwise.components.calculator import (
    CalculationResult,
    CalculatorDefinition,
    CatalogPort,
    UnitSystem,
    evaluate,
)
from cgwise.components.settings import (
    GUEST_MODE_ENABLED,
    MAX_GUEST_CALCULATIONS,
    SettingsRepoPort,
    get_bool,
    get_int,
)
from cgwise.domain.entities import GuestSession
from cgwise.domain.policy import PolicyEngine

from .models import (
    CalculationListOutput,
    CalculationOutput,
    CleanupGuestSessionsInput,
    CleanupOutput,
    ClearCalculationsInput,
    CreateGuestSessionInput,
    DeleteCalculationInput,
    GuestCalculation,
    GuestCalculationListOutput,
    GuestSessionInput,
    GuestSessionOutput,
    HistoryError,
    ListByDateInput,
    ListCalculationsInput,
    SaveCalculationInput,
    SavedCalculation,
    SaveGuestCalculationInput,
)
from .ports import GuestRepoPort, SavedCalculationRepoPort, TimePort

logger = logging.getLogger(__name__)

MSG_NO_VALUES = "Please enter values before saving the calculation."
MSG_NOT_OWNED = "Calculation not found or not owned by user"
MSG_GUEST_DISABLED = "Guest mode is currently disabled."
MSG_SESSION_NOT_FOUND = "Guest session not found"


def guest_limit_message(limit: int) -> str:
    return (
        f"Guest users are limited to {limit} calculations. "
        "Please create an account to continue."
    )


def _snapshot(
    definition: CalculatorDefinition,
    inputs: dict[str, float],
    unit_system: UnitSystem,
) -> tuple[dict[str, float], CalculationResult]:
    values = {f.key: float(inputs.get(f.key, 0.0)) for f in definition.inputs}
    values = {k: v if math.isfinite(v) else 0.0 for k, v in values.items()}
    kept = {k: v for k, v in values.items() if v != 0}
    return kept, evaluate(definition, values, unit_system)


def _unknown_calculator(calculator_id: str) -> HistoryError:
    return HistoryError(code="not_found", message=f"Calculator '{calculator_id}' not found")


# --- Saved Calculations ---


def run_save(
    inp: SaveCalculationInput,
    *,
    repo: SavedCalculationRepoPort,
    catalog: CatalogPort,
    policy: PolicyEngine,
    time: TimePort,
) -> CalculationOutput:
    if not policy.can_save_calculations(inp.actor):
        return CalculationOutput(
            error=HistoryError(code="forbidden", message="Access denied"), success=False
        )

    definition = catalog.get(inp.calculator_id)
    if definition is None:
        return CalculationOutput(error=_unknown_calculator(inp.calculator_id), success=False)

    kept, result = _snapshot(definition, inp.inputs, inp.unit_system)
    if not kept:
        return CalculationOutput(
            error=HistoryError(code="no_values", message=MSG_NO_VALUES), success=False
        )

    calculation = SavedCalculation(
        user_id=inp.actor.id,
        calculator_id=definition.id,
        calculator_name=definition.name,
        calculator_short_name=definition.short_name,
        inputs=kept,
        result=result,
        unit_system=inp.unit_system,
        notes=(inp.notes or "").strip() or None,
        saved_at=time.now_utc(),
    )
    repo.save(calculation)
    return CalculationOutput(calculation=calculation)


def run_list(inp: ListCalculationsInput, *, repo: SavedCalculationRepoPort) -> CalculationListOutput:
    return CalculationListOutput(calculations=repo.list_by_user(inp.actor.id))


def run_list_by_date(
    inp: ListByDateInput, *, repo: SavedCalculationRepoPort
) -> CalculationListOutput:
    return CalculationListOutput(
        calculations=repo.list_by_user(inp.actor.id, start=inp.start, end=inp.end)
    )


def run_delete(
    inp: DeleteCalculationInput, *, repo: SavedCalculationRepoPort
) -> CalculationOutput:
    calculation = repo.get(inp.calculation_id)
    if calculation is None or calculation.user_id != inp.actor.id:
        return CalculationOutput(
            error=HistoryError(code="not_found", message=MSG_NOT_OWNED), success=False
        )
    repo.delete(calculation.id)
    return CalculationOutput(calculation=calculation)


def run_clear_all(
    inp: ClearCalculationsInput, *, repo: SavedCalculationRepoPort
) -> CalculationListOutput:
    deleted = repo.delete_by_user(inp.actor.id)
    logger.info("Cleared %d saved calculations for %s", deleted, inp.actor.email)
    return CalculationListOutput(deleted=deleted)


# --- Guest Mode ---


def run_create_guest_session(
    inp: CreateGuestSessionInput,
    *,
    repo: GuestRepoPort,
    settings_repo: SettingsRepoPort,
    time: TimePort,
) -> GuestSessionOutput:
    if not get_bool(settings_repo, GUEST_MODE_ENABLED):
        return GuestSessionOutput(
            error=HistoryError(code="forbidden", message=MSG_GUEST_DISABLED), success=False
        )

    now = time.now_utc()
    session = GuestSession(
        max_calculations=get_int(settings_repo, MAX_GUEST_CALCULATIONS),
        created_at=now,
        last_activity=now,
    )
    repo.save_session(session)
    return GuestSessionOutput(session=session)


def _touch(repo: GuestRepoPort, session_id: str, time: TimePort) -> GuestSession | None:
    session = repo.get(session_id)
    if session is None:
        return None
    session.last_activity = time.now_utc()
    return repo.save_session(session)


def _session_not_found() -> HistoryError:
    return HistoryError(code="not_found", message=MSG_SESSION_NOT_FOUND)


def run_get_guest_session(
    inp: GuestSessionInput, *, repo: GuestRepoPort, time: TimePort
) -> GuestSessionOutput:
    session = _touch(repo, inp.session_id, time)
    if session is None:
        return GuestSessionOutput(error=_session_not_found(), success=False)
    return GuestSessionOutput(session=session)


def run_save_guest_calculation(
    inp: SaveGuestCalculationInput,
    *,
    repo: GuestRepoPort,
    catalog: CatalogPort,
    time: TimePort,
) -> GuestSessionOutput:
    session = repo.get(inp.session_id)
    if session is None:
        return GuestSessionOutput(error=_session_not_found(), success=False)

    if session.calculation_count >= session.max_calculations:
        return GuestSessionOutput(
            session=session,
            error=HistoryError(
                code="limit_reached", message=guest_limit_message(session.max_calculations)
            ),
            success=False,
        )

    definition = catalog.get(inp.calculator_id)
    if definition is None:
        return GuestSessionOutput(
            session=session, error=_unknown_calculator(inp.calculator_id), success=False
        )

    kept, result = _snapshot(definition, inp.inputs, inp.unit_system)
    if not kept:
        return GuestSessionOutput(
            session=session,
            error=HistoryError(code="no_values", message=MSG_NO_VALUES),
            success=False,
        )

    now = time.now_utc()
    calculation = GuestCalculation(
        session_id=session.id,
        calculator_id=definition.id,
        calculator_name=definition.name,
        calculator_short_name=definition.short_name,
        inputs=kept,
        result=result,
        unit_system=inp.unit_system,
        saved_at=now,
    )
    repo.save_calculation(calculation)

    session.calculation_count += 1
    session.last_activity = now
    repo.save_session(session)
    return GuestSessionOutput(session=session, calculation=calculation)


def run_list_guest_calculations(
    inp: GuestSessionInput, *, repo: GuestRepoPort, time: TimePort
) -> GuestCalculationListOutput:
    session = _touch(repo, inp.session_id, time)
    if session is None:
        return GuestCalculationListOutput(error=_session_not_found(), success=False)
    return GuestCalculationListOutput(
        calculations=repo.list_calculations(session.id), session=session
    )


def run_clear_guest_calculations(
    inp: GuestSessionInput, *, repo: GuestRepoPort, time: TimePort
) -> GuestSessionOutput:
    session = repo.get(inp.session_id)
    if session is None:
        return GuestSessionOutput(error=_session_not_found(), success=False)

    repo.delete_calculations(session.id)
    session.calculation_count = 0
    session.last_activity = time.now_utc()
    repo.save_session(session)
    return GuestSessionOutput(session=session)


def run_cleanup_guest_sessions(
    inp: CleanupGuestSessionsInput, *, repo: GuestRepoPort, time: TimePort
) -> CleanupOutput:
    cutoff = time.now_utc() - timedelta(days=inp.retention_days)
    deleted = repo.delete_idle_before(cutoff)
    if deleted:
        logger.info("Removed %d guest sessions idle since before %s", deleted, cutoff.isoformat())
    return CleanupOutput(deleted=deleted)
