from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str
    required_sections: list[str]

class PasswordHashingRules(BaseModel):
    algorithm: str
    min_length: int

class SessionCookieRules(BaseModel):
    secure: bool
    http_only: bool
    same_site: str

class SessionsRules(BaseModel):
    ttl_minutes: int = Field(gt=0)
    cookie: SessionCookieRules

class LockoutRules(BaseModel):
    lockout_minutes: int = Field(gt=0)
    warn_when_remaining_at_most: int = Field(ge=0)

class AuthRules(BaseModel):
    password_hashing: PasswordHashingRules
    sessions: SessionsRules
    lockout: LockoutRules
    super_admin_email: str

class RbacRules(BaseModel):
    roles: dict[str, list[str]]
    public_permissions: list[str]

class GuestRules(BaseModel):
    retention_days: int = Field(gt=0)

class MailRules(BaseModel):
    from_address: str
    admin_inbox: str

class RateLimitWindow(BaseModel):
    window_seconds: int
    max_attempts: int | None = None
    max_requests: int | None = None

class RateLimitRules(BaseModel):
    login: RateLimitWindow
    request_access: RateLimitWindow

class AdminBootstrapRules(BaseModel):
    enabled_if_no_users: bool
    required_env_when_enabled: list[str]

class OpsRules(BaseModel):
    data_dir_required: bool
    required_env: list[str]
    bootstrap_admin: AdminBootstrapRules

class Rules(BaseModel):
    project: ProjectRules
    auth: AuthRules
    rbac: RbacRules
    guest: GuestRules
    mail: MailRules
    rate_limits: RateLimitRules
    ops: OpsRules
