"""
Auth component - Authentication and account preferences.

Handles login with lockout, token sessions, and user preferences.
"""

from .component import (
    run_create_admin,
    run_create_session,
    run_login,
    run_update_preferences,
    run_verify_token,
)
from .models import (
    AuthOutput,
    CreateAdminInput,
    CreateSessionInput,
    LoginInput,
    UpdatePreferencesInput,
    UserOutput,
    VerifyTokenInput,
)
from .ports import (
    AccessRequestLookupPort,
    AuthAdapterPort,
    LoginAttemptRepoPort,
    TimePort,
    UserRepoPort,
)

__all__ = [
    # Entry points
    "run_login",
    "run_create_session",
    "run_verify_token",
    "run_update_preferences",
    "run_create_admin",
    # Models
    "AuthOutput",
    "CreateAdminInput",
    "CreateSessionInput",
    "LoginInput",
    "UpdatePreferencesInput",
    "UserOutput",
    "VerifyTokenInput",
    # Ports
    "AccessRequestLookupPort",
    "AuthAdapterPort",
    "LoginAttemptRepoPort",
    "TimePort",
    "UserRepoPort",
]
