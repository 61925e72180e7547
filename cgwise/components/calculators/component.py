"""
Calculators component - the persisted, admin-managed calculator catalog.

Public callers see enabled calculators ordered by popularity; admins create,
edit, disable and delete calculators, or restore the built-in catalog.
Definitions are validated on every write, so a stored formula can never
reference an input that does not exist.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from cgwise.components.calculator import (
    DEFAULT_CALCULATORS,
    CalculatorDefinition,
    CalculatorValidationError,
)
from cgwise.domain.policy import PolicyEngine

from .models import (
    CalculatorRecord,
    CreateCalculatorInput,
    DeleteCalculatorInput,
    GetRecordInput,
    ListAllInput,
    ListEnabledInput,
    RecordListOutput,
    RecordOutput,
    ResetCatalogInput,
    TrackUsageInput,
    UpdateCalculatorInput,
)
from .ports import CalculatorRepoPort, TimePort

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "short_name", "description", "categories", "inputs", "formula"})

_ACCESS_DENIED = CalculatorValidationError(code="forbidden", message="Access denied")


def _not_found(calculator_id: str) -> CalculatorValidationError:
    return CalculatorValidationError(
        code="not_found",
        message=f"Calculator '{calculator_id}' not found",
        field="calculator_id",
    )


def _parse_pydantic_errors(exc: PydanticValidationError) -> list[CalculatorValidationError]:
    """Flatten a pydantic error into field-addressed validation errors."""
    errors: list[CalculatorValidationError] = []
    for error in exc.errors():
        loc = error.get("loc", ())
        field = ".".join(str(part) for part in loc) if loc else "_schema"
        error_type = error.get("type", "unknown")
        if "missing" in error_type:
            code = "required"
        elif error_type == "value_error":
            code = "invalid_definition"
        else:
            code = "invalid_value"
        errors.append(
            CalculatorValidationError(code=code, message=error.get("msg", "Invalid value"), field=field)
        )
    return errors


def _build_definition(
    data: dict[str, Any],
) -> tuple[CalculatorDefinition | None, list[CalculatorValidationError]]:
    unknown = sorted(k for k in data if k not in EDITABLE_FIELDS and k != "id")
    if unknown:
        return None, [
            CalculatorValidationError(
                code="unknown_field", message=f"Unknown field '{k}'", field=k
            )
            for k in unknown
        ]
    try:
        return CalculatorDefinition.model_validate(data), []
    except PydanticValidationError as e:
        return None, _parse_pydantic_errors(e)


def seed_defaults(repo: CalculatorRepoPort, time: TimePort) -> list[CalculatorRecord]:
    now = time.now_utc()
    records = [
        CalculatorRecord(definition=d, position=i, created_at=now, updated_at=now)
        for i, d in enumerate(DEFAULT_CALCULATORS)
    ]
    for record in records:
        repo.save(record)
    logger.info("Seeded %d default calculators", len(records))
    return records


# --- Public Entry Points ---


def run_list_enabled(
    inp: ListEnabledInput, *, repo: CalculatorRepoPort, time: TimePort
) -> RecordListOutput:
    """Enabled calculators, most used first. An empty catalog is seeded with the defaults."""
    if repo.count() == 0:
        seed_defaults(repo, time)
    return RecordListOutput(records=[r for r in repo.list_all() if r.enabled])


def run_get(inp: GetRecordInput, *, repo: CalculatorRepoPort) -> RecordOutput:
    record = repo.get(inp.calculator_id)
    if record is None or not record.enabled:
        return RecordOutput(errors=[_not_found(inp.calculator_id)], success=False)
    return RecordOutput(record=record)


def run_track_usage(inp: TrackUsageInput, *, repo: CalculatorRepoPort) -> RecordOutput:
    if not repo.increment_usage(inp.calculator_id):
        return RecordOutput(errors=[_not_found(inp.calculator_id)], success=False)
    return RecordOutput(record=repo.get(inp.calculator_id))


# --- Admin Entry Points ---


def run_list_all(
    inp: ListAllInput, *, repo: CalculatorRepoPort, policy: PolicyEngine
) -> RecordListOutput:
    if not policy.can_manage_calculators(inp.actor):
        return RecordListOutput(errors=[_ACCESS_DENIED], success=False)
    return RecordListOutput(records=repo.list_all())


def run_create(
    inp: CreateCalculatorInput,
    *,
    repo: CalculatorRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> RecordOutput:
    if not policy.can_manage_calculators(inp.actor):
        return RecordOutput(errors=[_ACCESS_DENIED], success=False)

    data = {k: v for k, v in inp.data.items() if k != "id"}
    data["id"] = f"calc_{uuid4().hex}"
    definition, errors = _build_definition(data)
    if definition is None:
        return RecordOutput(errors=errors, success=False)

    now = time.now_utc()
    position = max((r.position for r in repo.list_all()), default=-1) + 1
    record = CalculatorRecord(
        definition=definition,
        enabled=inp.enabled,
        position=position,
        created_at=now,
        updated_at=now,
    )
    repo.save(record)
    logger.info("Calculator %s (%s) created by %s", record.id, definition.name, inp.actor.email)
    return RecordOutput(record=record)


def run_update(
    inp: UpdateCalculatorInput,
    *,
    repo: CalculatorRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> RecordOutput:
    if not policy.can_manage_calculators(inp.actor):
        return RecordOutput(errors=[_ACCESS_DENIED], success=False)

    current = repo.get(inp.calculator_id)
    if current is None:
        return RecordOutput(errors=[_not_found(inp.calculator_id)], success=False)

    if not inp.updates and inp.enabled is None:
        return RecordOutput(
            errors=[CalculatorValidationError(code="no_updates", message="No valid updates provided")],
            success=False,
        )

    definition = current.definition
    if inp.updates:
        merged = definition.model_dump(mode="json")
        merged.update({k: v for k, v in inp.updates.items() if k != "id"})
        built, errors = _build_definition(merged)
        if built is None:
            return RecordOutput(errors=errors, success=False)
        definition = built

    record = current.model_copy(
        update={
            "definition": definition,
            "enabled": current.enabled if inp.enabled is None else inp.enabled,
            "updated_at": time.now_utc(),
        }
    )
    repo.save(record)
    logger.info("Calculator %s updated by %s", record.id, inp.actor.email)
    return RecordOutput(record=record)


def run_delete(
    inp: DeleteCalculatorInput, *, repo: CalculatorRepoPort, policy: PolicyEngine
) -> RecordOutput:
    if not policy.can_manage_calculators(inp.actor):
        return RecordOutput(errors=[_ACCESS_DENIED], success=False)

    if not repo.delete(inp.calculator_id):
        return RecordOutput(errors=[_not_found(inp.calculator_id)], success=False)
    logger.info("Calculator %s deleted by %s", inp.calculator_id, inp.actor.email)
    return RecordOutput()


def run_reset_to_defaults(
    inp: ResetCatalogInput,
    *,
    repo: CalculatorRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> RecordListOutput:
    """Replace the whole catalog, custom calculators included, with the defaults."""
    if not policy.can_manage_calculators(inp.actor):
        return RecordListOutput(errors=[_ACCESS_DENIED], success=False)

    repo.delete_all()
    records = seed_defaults(repo, time)
    logger.warning("Calculator catalog reset to defaults by %s", inp.actor.email)
    return RecordListOutput(records=records)


# --- Catalog Adapter ---


class PersistedCatalog:
    """CatalogPort over the calculator repository (enabled calculators only)."""

    def __init__(self, repo: CalculatorRepoPort, time: TimePort):
        self._repo = repo
        self._time = time

    def get(self, calculator_id: str) -> CalculatorDefinition | None:
        if self._repo.count() == 0:
            seed_defaults(self._repo, self._time)
        result = run_get(GetRecordInput(calculator_id=calculator_id), repo=self._repo)
        return result.record.definition if result.record else None

    def list_enabled(self) -> list[CalculatorDefinition]:
        result = run_list_enabled(ListEnabledInput(), repo=self._repo, time=self._time)
        return [r.definition for r in result.records]
