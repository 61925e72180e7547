"""
Settings component - system-wide switches and limits.

Settings live in a key/value table. A key that has never been written reads
as its default, so a fresh database behaves exactly like the defaults below.
"""

from __future__ import annotations

import logging
from typing import Any

from cgwise.domain.policy import PolicyEngine

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

logger = logging.getLogger(__name__)

MAX_LOGIN_ATTEMPTS = "maxLoginAttempts"
MAINTENANCE_MODE = "maintenanceMode"
GUEST_MODE_ENABLED = "guestModeEnabled"
MAX_GUEST_CALCULATIONS = "maxGuestCalculations"

SETTING_SPECS: dict[str, SettingSpec] = {
    spec.key: spec
    for spec in (
        SettingSpec(key=MAX_LOGIN_ATTEMPTS, kind=int, default=5, min_value=1),
        SettingSpec(key=MAINTENANCE_MODE, kind=bool, default=False),
        SettingSpec(key=GUEST_MODE_ENABLED, kind=bool, default=True),
        SettingSpec(key=MAX_GUEST_CALCULATIONS, kind=int, default=50, min_value=1),
    )
}


# --- Encoding ---


def _decode(spec: SettingSpec, raw: str | None) -> SettingValue:
    if raw is None:
        return spec.default
    if spec.kind is bool:
        return raw.strip().lower() in ("true", "1", "yes")
    try:
        return int(raw)
    except ValueError:
        logger.warning("Setting %s has non-integer value %r, using default", spec.key, raw)
        return spec.default


def _encode(value: SettingValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# --- Readers ---


def get_all(repo: SettingsRepoPort) -> dict[str, SettingValue]:
    stored = repo.get_all()
    return {key: _decode(spec, stored.get(key)) for key, spec in SETTING_SPECS.items()}


def get_int(repo: SettingsRepoPort, key: str) -> int:
    spec = SETTING_SPECS[key]
    if spec.kind is not int:
        raise KeyError(f"Setting '{key}' is not an integer setting")
    return int(_decode(spec, repo.get(key)))


def get_bool(repo: SettingsRepoPort, key: str) -> bool:
    spec = SETTING_SPECS[key]
    if spec.kind is not bool:
        raise KeyError(f"Setting '{key}' is not a boolean setting")
    return bool(_decode(spec, repo.get(key)))


# --- Validation ---


def _validate(key: str, value: Any) -> tuple[SettingValue | None, list[ValidationError]]:
    spec = SETTING_SPECS.get(key)
    if spec is None:
        return None, [
            ValidationError(field=key, code="unknown_setting", message=f"Unknown setting '{key}'")
        ]

    if spec.kind is bool:
        if not isinstance(value, bool):
            return None, [
                ValidationError(
                    field=key, code="invalid_type", message=f"Setting '{key}' must be true or false"
                )
            ]
        return value, []

    # bool is an int subclass; reject it for numeric settings
    if isinstance(value, bool) or not isinstance(value, int):
        return None, [
            ValidationError(
                field=key, code="invalid_type", message=f"Setting '{key}' must be an integer"
            )
        ]
    if spec.min_value is not None and value < spec.min_value:
        return None, [
            ValidationError(
                field=key,
                code="out_of_range",
                message=f"Setting '{key}' must be at least {spec.min_value}",
            )
        ]
    return value, []


# --- Component Entry Points ---


def run_get(inp: GetSettingsInput, *, repo: SettingsRepoPort) -> GetSettingsOutput:
    return GetSettingsOutput(settings=get_all(repo))


def run_update(
    inp: UpdateSettingInput,
    *,
    repo: SettingsRepoPort,
    policy: PolicyEngine,
    time: TimePort,
) -> UpdateSettingOutput:
    """
    Update one setting (admin only).

    Returns the full settings map on success, or validation errors with the
    current settings left untouched.
    """
    if not policy.can_manage_settings(inp.actor):
        return UpdateSettingOutput(
            errors=[ValidationError(field="actor", code="forbidden", message="Access denied")],
            success=False,
        )

    value, errors = _validate(inp.key, inp.value)
    if errors or value is None:
        return UpdateSettingOutput(settings=get_all(repo), errors=errors, success=False)

    repo.set(inp.key, _encode(value), time.now_utc())
    logger.info("Setting %s updated to %s by %s", inp.key, value, inp.actor.email)
    return UpdateSettingOutput(settings=get_all(repo))


def run(
    inp: GetSettingsInput | UpdateSettingInput,
    *,
    repo: SettingsRepoPort,
    policy: PolicyEngine | None = None,
    time: TimePort | None = None,
) -> GetSettingsOutput | UpdateSettingOutput:
    if isinstance(inp, GetSettingsInput):
        return run_get(inp, repo=repo)
    elif isinstance(inp, UpdateSettingInput):
        assert policy and time
        return run_update(inp, repo=repo, policy=policy, time=time)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
