"""
History component - saved calculations and guest sessions.
"""

from .component import (
    MSG_GUEST_DISABLED,
    MSG_NO_VALUES,
    MSG_NOT_OWNED,
    MSG_SESSION_NOT_FOUND,
    guest_limit_message,
    run_cleanup_guest_sessions,
    run_clear_all,
    run_clear_guest_calculations,
    run_create_guest_session,
    run_delete,
    run_get_guest_session,
    run_list,
    run_list_by_date,
    run_list_guest_calculations,
    run_save,
    run_save_guest_calculation,
)
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

__all__ = [
    # Saved calculations
    "run_save",
    "run_list",
    "run_list_by_date",
    "run_delete",
    "run_clear_all",
    # Guest mode
    "run_create_guest_session",
    "run_get_guest_session",
    "run_save_guest_calculation",
    "run_list_guest_calculations",
    "run_clear_guest_calculations",
    "run_cleanup_guest_sessions",
    "guest_limit_message",
    # Messages
    "MSG_GUEST_DISABLED",
    "MSG_NO_VALUES",
    "MSG_NOT_OWNED",
    "MSG_SESSION_NOT_FOUND",
    # Models
    "SavedCalculation",
    "GuestCalculation",
    "SaveCalculationInput",
    "ListCalculationsInput",
    "ListByDateInput",
    "DeleteCalculationInput",
    "ClearCalculationsInput",
    "CreateGuestSessionInput",
    "GuestSessionInput",
    "SaveGuestCalculationInput",
    "CleanupGuestSessionsInput",
    "HistoryError",
    "CalculationOutput",
    "CalculationListOutput",
    "GuestSessionOutput",
    "GuestCalculationListOutput",
    "CleanupOutput",
    # Ports
    "SavedCalculationRepoPort",
    "GuestRepoPort",
    "TimePort",
]
