"""
Access component - access-request workflow and user administration.
"""

from .component import (
    MSG_NO_UPDATES,
    MSG_REQUEST_EXISTS,
    MSG_REQUEST_NOT_FOUND,
    MSG_USER_EXISTS,
    run_approve,
    run_list_requests,
    run_list_users,
    run_reject,
    run_request_access,
    run_update_user,
    run_upgrade_guest,
)
from .models import (
    AccessRequestOutput,
    AccessValidationError,
    ApproveRequestInput,
    ListRequestsInput,
    ListUsersInput,
    RejectRequestInput,
    RequestAccessInput,
    RequestListOutput,
    UpdateUserInput,
    UpgradeGuestInput,
    UserListOutput,
    UserOutput,
)
from .ports import (
    AccessRequestRepoPort,
    GuestSessionPort,
    PasswordHasherPort,
    TimePort,
    UserRepoPort,
)

__all__ = [
    # Entry points
    "run_request_access",
    "run_upgrade_guest",
    "run_list_requests",
    "run_approve",
    "run_reject",
    "run_list_users",
    "run_update_user",
    # Messages
    "MSG_NO_UPDATES",
    "MSG_REQUEST_EXISTS",
    "MSG_REQUEST_NOT_FOUND",
    "MSG_USER_EXISTS",
    # Models
    "AccessRequestOutput",
    "AccessValidationError",
    "ApproveRequestInput",
    "ListRequestsInput",
    "ListUsersInput",
    "RejectRequestInput",
    "RequestAccessInput",
    "RequestListOutput",
    "UpdateUserInput",
    "UpgradeGuestInput",
    "UserListOutput",
    "UserOutput",
    # Ports
    "AccessRequestRepoPort",
    "GuestSessionPort",
    "PasswordHasherPort",
    "TimePort",
    "UserRepoPort",
]
