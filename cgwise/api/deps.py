import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from cgwise.adapters.auth.crypto import JWTAuthAdapter
from cgwise.adapters.clock import SystemClock
from cgwise.adapters.dev_email import DevEmailAdapter
from cgwise.adapters.sqlite.repos import (
    SQLiteAccessRequestRepo,
    SQLiteCalculatorRepo,
    SQLiteEmailRecordRepo,
    SQLiteGuestRepo,
    SQLiteLoginAttemptRepo,
    SQLiteSavedCalculationRepo,
    SQLiteSettingsRepo,
    SQLiteSystemLogRepo,
    SQLiteUserRepo,
)
from cgwise.app_shell.rate_limit import RateLimiter
from cgwise.components.auth import VerifyTokenInput, run_verify_token
from cgwise.components.calculators import PersistedCatalog
from cgwise.domain.entities import User
from cgwise.domain.policy import PolicyEngine
from cgwise.rules.loader import load_rules
from cgwise.rules.models import Rules

COOKIE_NAME = "access_token"


# --- Settings ---
class Settings:
    def __init__(self, data_dir: str | None = None) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(data_dir or os.environ.get("CGW_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "cgwise.db")
        self.rules_path = Path(os.environ.get("CGW_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = str(self.base_dir / "migrations")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_policy(rules: Rules = Depends(get_rules)) -> PolicyEngine:
    return PolicyEngine(rules)


# --- Repos ---
def get_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteUserRepo:
    return SQLiteUserRepo(settings.db_path)


def get_access_request_repo(
    settings: Settings = Depends(get_settings),
) -> SQLiteAccessRequestRepo:
    return SQLiteAccessRequestRepo(settings.db_path)


def get_login_attempt_repo(settings: Settings = Depends(get_settings)) -> SQLiteLoginAttemptRepo:
    return SQLiteLoginAttemptRepo(settings.db_path)


def get_settings_repo(settings: Settings = Depends(get_settings)) -> SQLiteSettingsRepo:
    return SQLiteSettingsRepo(settings.db_path)


def get_log_repo(settings: Settings = Depends(get_settings)) -> SQLiteSystemLogRepo:
    return SQLiteSystemLogRepo(settings.db_path)


def get_calculator_repo(settings: Settings = Depends(get_settings)) -> SQLiteCalculatorRepo:
    return SQLiteCalculatorRepo(settings.db_path)


def get_saved_calculation_repo(
    settings: Settings = Depends(get_settings),
) -> SQLiteSavedCalculationRepo:
    return SQLiteSavedCalculationRepo(settings.db_path)


def get_guest_repo(settings: Settings = Depends(get_settings)) -> SQLiteGuestRepo:
    return SQLiteGuestRepo(settings.db_path)


# --- Adapters ---
def get_auth_adapter() -> JWTAuthAdapter:
    return JWTAuthAdapter()


_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


def get_mailer(settings: Settings = Depends(get_settings)) -> DevEmailAdapter:
    return DevEmailAdapter(store=SQLiteEmailRecordRepo(settings.db_path))


def get_catalog(
    repo: SQLiteCalculatorRepo = Depends(get_calculator_repo),
    clock: SystemClock = Depends(get_clock),
) -> PersistedCatalog:
    return PersistedCatalog(repo, clock)


_rate_limiter_instance: RateLimiter | None = None


def get_rate_limiter(rules: Rules = Depends(get_rules)) -> RateLimiter:
    """Process-wide limiter; counts live in memory."""
    global _rate_limiter_instance
    if _rate_limiter_instance is None:
        _rate_limiter_instance = RateLimiter(rules.rate_limits)
    return _rate_limiter_instance


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


async def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
) -> User:
    # Cookie wins over the Authorization header
    cookie_token = request.cookies.get(COOKIE_NAME)
    if cookie_token and cookie_token.startswith("Bearer "):
        token = cookie_token.split(" ", 1)[1]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = run_verify_token(
        VerifyTokenInput(token=token), user_repo=user_repo, auth_adapter=auth_adapter
    )
    if not result.success or result.user is None:
        code = (
            status.HTTP_403_FORBIDDEN
            if result.error_code == "forbidden"
            else status.HTTP_401_UNAUTHORIZED
        )
        raise HTTPException(
            status_code=code,
            detail=result.error or "Invalid token",
            headers={"WWW-Authenticate": "Bearer"} if code == 401 else None,
        )

    return result.user
