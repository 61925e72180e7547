"""
Settings component - system settings with typed defaults.
"""

from .component import (
    GUEST_MODE_ENABLED,
    MAINTENANCE_MODE,
    MAX_GUEST_CALCULATIONS,
    MAX_LOGIN_ATTEMPTS,
    SETTING_SPECS,
    get_all,
    get_bool,
    get_int,
    run,
    run_get,
    run_update,
)
from .models import (
    GetSettingsInput,
    GetSettingsOutput,
    SettingSpec,
    SettingValue,
    UpdateSettingInput,
    UpdateSettingOutput,
    ValidationError,
)
from .ports import SettingsRepoPort, TimePort

__all__ = [
    # Component entry points
    "run",
    "run_get",
    "run_update",
    # Readers
    "get_all",
    "get_int",
    "get_bool",
    # Keys
    "MAX_LOGIN_ATTEMPTS",
    "MAINTENANCE_MODE",
    "GUEST_MODE_ENABLED",
    "MAX_GUEST_CALCULATIONS",
    "SETTING_SPECS",
    # Models
    "GetSettingsInput",
    "GetSettingsOutput",
    "UpdateSettingInput",
    "UpdateSettingOutput",
    "SettingSpec",
    "SettingValue",
    "ValidationError",
    # Ports
    "SettingsRepoPort",
    "TimePort",
]
