from dataclasses import asdict
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from cgwise.adapters.auth.crypto import JWTAuthAdapter
from cgwise.adapters.clock import SystemClock
from cgwise.adapters.dev_email import DevEmailAdapter
from cgwise.adapters.sqlite.repos import (
    SQLiteAccessRequestRepo,
    SQLiteGuestRepo,
    SQLiteLoginAttemptRepo,
    SQLiteSettingsRepo,
    SQLiteSystemLogRepo,
    SQLiteUserRepo,
)
from cgwise.api.deps import (
    COOKIE_NAME,
    client_key,
    get_access_request_repo,
    get_auth_adapter,
    get_clock,
    get_current_user,
    get_guest_repo,
    get_log_repo,
    get_login_attempt_repo,
    get_mailer,
    get_policy,
    get_rate_limiter,
    get_rules,
    get_settings_repo,
    get_user_repo,
)
from cgwise.api.schemas import (
    AccessRequestResponse,
    LoginResponse,
    PreferencesUpdateRequest,
    RequestAccessRequest,
    UpgradeGuestRequest,
    UserResponse,
)
from cgwise.app_shell.rate_limit import RateLimiter
from cgwise.components.access import (
    AccessRequestOutput,
    RequestAccessInput,
    UpgradeGuestInput,
    run_request_access,
    run_upgrade_guest,
)
from cgwise.components.auth import (
    CreateSessionInput,
    LoginInput,
    UpdatePreferencesInput,
    run_create_session,
    run_login,
    run_update_preferences,
)
from cgwise.domain.entities import User
from cgwise.domain.policy import PolicyEngine
from cgwise.rules.models import Rules

router = APIRouter()

_LOGIN_STATUS = {
    "unauthorized": status.HTTP_401_UNAUTHORIZED,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "locked": status.HTTP_429_TOO_MANY_REQUESTS,
}

_TOO_MANY = "Too many requests. Please try again later."


@router.post("/login", response_model=LoginResponse)
async def login_for_access_token(
    request: Request,
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    request_repo: SQLiteAccessRequestRepo = Depends(get_access_request_repo),
    attempts_repo: SQLiteLoginAttemptRepo = Depends(get_login_attempt_repo),
    settings_repo: SQLiteSettingsRepo = Depends(get_settings_repo),
    log_repo: SQLiteSystemLogRepo = Depends(get_log_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    policy: PolicyEngine = Depends(get_policy),
    rules: Rules = Depends(get_rules),
    limiter: RateLimiter = Depends(get_rate_limiter),
    clock: SystemClock = Depends(get_clock),
) -> LoginResponse:
    """Authenticate with email (as ``username``) and password; sets the session cookie."""
    if not limiter.check_login(client_key(request)):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=_TOO_MANY)

    result = run_login(
        LoginInput(email=form_data.username, password=form_data.password),
        user_repo=user_repo,
        request_repo=request_repo,
        attempts_repo=attempts_repo,
        settings_repo=settings_repo,
        log_repo=log_repo,
        auth_adapter=auth_adapter,
        policy=policy,
        time=clock,
    )
    if not result.success or result.user is None:
        code = _LOGIN_STATUS.get(result.error_code or "", status.HTTP_401_UNAUTHORIZED)
        raise HTTPException(
            status_code=code,
            detail=result.error,
            headers={"WWW-Authenticate": "Bearer"} if code == 401 else None,
        )

    ttl = rules.auth.sessions.ttl_minutes
    session = run_create_session(
        CreateSessionInput(user=result.user), auth_adapter=auth_adapter, ttl_minutes=ttl
    )
    token = session.token_raw or ""

    cookie = rules.auth.sessions.cookie
    response.set_cookie(
        key=COOKIE_NAME,
        value=f"Bearer {token}",
        httponly=cookie.http_only,
        max_age=ttl * 60,
        expires=ttl * 60,
        samesite=cookie.same_site,  # type: ignore[arg-type]
        secure=cookie.secure,
    )

    user = UserResponse.from_user(result.user, is_admin=policy.is_admin(result.user))
    return LoginResponse(access_token=token, user=user)


@router.post("/logout")
def logout(response: Response) -> dict[str, str]:
    response.delete_cookie(key=COOKIE_NAME)
    return {"status": "success"}


@router.get("/me", response_model=UserResponse)
def read_users_me(
    current_user: User = Depends(get_current_user),
    policy: PolicyEngine = Depends(get_policy),
) -> UserResponse:
    return UserResponse.from_user(current_user, is_admin=policy.is_admin(current_user))


@router.patch("/me/preferences", response_model=UserResponse)
def update_preferences(
    req: PreferencesUpdateRequest,
    current_user: User = Depends(get_current_user),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> UserResponse:
    result = run_update_preferences(
        UpdatePreferencesInput(actor=current_user, **req.model_dump()),
        user_repo=user_repo,
    )
    if not result.success or result.user is None:
        raise HTTPException(status_code=404, detail=result.error)
    return UserResponse.from_user(result.user, is_admin=policy.is_admin(result.user))


def _raise_for_request(result: AccessRequestOutput) -> None:
    if result.success:
        return
    if result.error_code == "invalid":
        detail: Any = [asdict(e) for e in result.errors]
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    if result.error_code == "conflict":
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.error)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)


@router.post(
    "/request-access", response_model=AccessRequestResponse, status_code=status.HTTP_201_CREATED
)
def request_access(
    req: RequestAccessRequest,
    request: Request,
    request_repo: SQLiteAccessRequestRepo = Depends(get_access_request_repo),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    mailer: DevEmailAdapter = Depends(get_mailer),
    log_repo: SQLiteSystemLogRepo = Depends(get_log_repo),
    policy: PolicyEngine = Depends(get_policy),
    limiter: RateLimiter = Depends(get_rate_limiter),
    clock: SystemClock = Depends(get_clock),
) -> AccessRequestResponse:
    if not limiter.check_request_access(client_key(request)):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=_TOO_MANY)

    result = run_request_access(
        RequestAccessInput(**req.model_dump()),
        request_repo=request_repo,
        user_repo=user_repo,
        hasher=auth_adapter,
        mailer=mailer,
        log_repo=log_repo,
        policy=policy,
        time=clock,
    )
    _raise_for_request(result)
    assert result.request is not None
    return AccessRequestResponse.from_request(result.request)


@router.post(
    "/upgrade-guest", response_model=AccessRequestResponse, status_code=status.HTTP_201_CREATED
)
def upgrade_guest(
    req: UpgradeGuestRequest,
    request: Request,
    request_repo: SQLiteAccessRequestRepo = Depends(get_access_request_repo),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    guest_repo: SQLiteGuestRepo = Depends(get_guest_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    mailer: DevEmailAdapter = Depends(get_mailer),
    log_repo: SQLiteSystemLogRepo = Depends(get_log_repo),
    policy: PolicyEngine = Depends(get_policy),
    limiter: RateLimiter = Depends(get_rate_limiter),
    clock: SystemClock = Depends(get_clock),
) -> AccessRequestResponse:
    """Request an account from a guest session; the session is retired on success."""
    if not limiter.check_request_access(client_key(request)):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=_TOO_MANY)

    result = run_upgrade_guest(
        UpgradeGuestInput(**req.model_dump()),
        request_repo=request_repo,
        user_repo=user_repo,
        guest_repo=guest_repo,
        hasher=auth_adapter,
        mailer=mailer,
        log_repo=log_repo,
        policy=policy,
        time=clock,
    )
    _raise_for_request(result)
    assert result.request is not None
    return AccessRequestResponse.from_request(result.request)
