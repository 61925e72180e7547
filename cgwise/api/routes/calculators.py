from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from cgwise.adapters.sqlite.repos import SQLiteCalculatorRepo
from cgwise.api.deps import get_calculator_repo, get_catalog
from cgwise.api.schemas import EvaluateRequest, EvaluateResponse, GaugeResponse
from cgwise.components.calculator import (
    EvaluateInput,
    GetCalculatorInput,
    ListCatalogInput,
    gauge_position,
    is_optimal,
    run_evaluate,
    run_get_calculator,
    run_list_catalog,
)
from cgwise.components.calculators import PersistedCatalog, TrackUsageInput, run_track_usage

router = APIRouter()


@router.get("")
def list_calculators(
    category: str | None = None,
    catalog: PersistedCatalog = Depends(get_catalog),
) -> dict[str, Any]:
    """Enabled calculators, most used first. ``categories`` always covers the full set."""
    result = run_list_catalog(ListCatalogInput(category=category), catalog=catalog)
    return {
        "calculators": [c.to_json_dict() for c in result.calculators],
        "categories": list(result.categories),
    }


@router.get("/{calculator_id}")
def get_calculator(
    calculator_id: str,
    catalog: PersistedCatalog = Depends(get_catalog),
) -> dict[str, Any]:
    result = run_get_calculator(GetCalculatorInput(calculator_id=calculator_id), catalog=catalog)
    if not result.success or result.calculator is None:
        raise HTTPException(status_code=404, detail=result.errors[0].message)
    return result.calculator.to_json_dict()


@router.post("/{calculator_id}/evaluate", response_model=EvaluateResponse)
def evaluate_calculator(
    calculator_id: str,
    req: EvaluateRequest,
    catalog: PersistedCatalog = Depends(get_catalog),
) -> EvaluateResponse:
    """Evaluate raw form text. Unparseable fields count as zero; no result is ``value: null``."""
    result = run_evaluate(
        EvaluateInput(
            calculator_id=calculator_id, raw_values=req.values, unit_system=req.unit_system
        ),
        catalog=catalog,
    )
    if not result.success or result.result is None:
        raise HTTPException(status_code=404, detail=result.errors[0].message)

    gauge = gauge_position(result.result)
    return EvaluateResponse(
        calculator_id=calculator_id,
        unit_system=req.unit_system,
        inputs=result.inputs,
        result=result.result,
        result_unit=result.result.unit.for_system(req.unit_system),
        gauge=GaugeResponse(**vars(gauge)) if gauge else None,
        optimal=is_optimal(result.result),
    )


@router.post("/{calculator_id}/usage")
def track_usage(
    calculator_id: str,
    repo: SQLiteCalculatorRepo = Depends(get_calculator_repo),
) -> dict[str, Any]:
    result = run_track_usage(TrackUsageInput(calculator_id=calculator_id), repo=repo)
    if not result.success or result.record is None:
        raise HTTPException(status_code=404, detail=result.errors[0].message)
    return {"id": result.record.id, "usage_count": result.record.usage_count}
