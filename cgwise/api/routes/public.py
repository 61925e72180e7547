from typing import Any

from fastapi import APIRouter, Depends

from cgwise.adapters.sqlite.repos import SQLiteSettingsRepo
from cgwise.api.deps import get_settings_repo
from cgwise.components.settings import (
    GUEST_MODE_ENABLED,
    MAINTENANCE_MODE,
    MAX_GUEST_CALCULATIONS,
    get_bool,
    get_int,
)

router = APIRouter()


@router.get("/settings")
def public_settings(repo: SQLiteSettingsRepo = Depends(get_settings_repo)) -> dict[str, Any]:
    """The settings a signed-out client needs to render its entry screen."""
    return {
        MAINTENANCE_MODE: get_bool(repo, MAINTENANCE_MODE),
        GUEST_MODE_ENABLED: get_bool(repo, GUEST_MODE_ENABLED),
        MAX_GUEST_CALCULATIONS: get_int(repo, MAX_GUEST_CALCULATIONS),
    }
