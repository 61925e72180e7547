"""
Calculators component - persisted calculator catalog with admin management.
"""

from .component import (
    EDITABLE_FIELDS,
    PersistedCatalog,
    run_create,
    run_delete,
    run_get,
    run_list_all,
    run_list_enabled,
    run_reset_to_defaults,
    run_track_usage,
    run_update,
    seed_defaults,
)
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

__all__ = [
    # Public entry points
    "run_list_enabled",
    "run_get",
    "run_track_usage",
    # Admin entry points
    "run_list_all",
    "run_create",
    "run_update",
    "run_delete",
    "run_reset_to_defaults",
    "seed_defaults",
    "PersistedCatalog",
    "EDITABLE_FIELDS",
    # Models
    "CalculatorRecord",
    "CreateCalculatorInput",
    "DeleteCalculatorInput",
    "GetRecordInput",
    "ListAllInput",
    "ListEnabledInput",
    "RecordListOutput",
    "RecordOutput",
    "ResetCatalogInput",
    "TrackUsageInput",
    "UpdateCalculatorInput",
    # Ports
    "CalculatorRepoPort",
    "TimePort",
]
