import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cgwise.adapters.auth.crypto import JWTAuthAdapter
from cgwise.adapters.clock import SystemClock
from cgwise.adapters.sqlite.migrator import SQLiteMigrator
from cgwise.adapters.sqlite.repos import SQLiteCalculatorRepo, SQLiteUserRepo
from cgwise.api.deps import Settings, get_settings
from cgwise.app_shell.config import ConfigError, bootstrap_credentials, validate_ops_rules
from cgwise.components.auth import CreateAdminInput, run_create_admin
from cgwise.components.calculators import seed_defaults
from cgwise.domain.policy import PolicyEngine
from cgwise.rules.loader import load_rules
from cgwise.rules.models import Rules

logger = logging.getLogger(__name__)


def prepare_storage(settings: Settings, rules: Rules) -> None:
    """Migrate the database, seed the calculator catalog and bootstrap the first admin."""
    SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()

    clock = SystemClock()
    calculators = SQLiteCalculatorRepo(settings.db_path)
    if calculators.count() == 0:
        seeded = seed_defaults(calculators, clock)
        logger.info("Seeded %d default calculators", len(seeded))

    users = SQLiteUserRepo(settings.db_path)
    creds = bootstrap_credentials(rules)
    if creds and not users.list_all():
        email, password = creds
        result = run_create_admin(
            CreateAdminInput(email=email, name="Administrator", password=password),
            user_repo=users,
            auth_adapter=JWTAuthAdapter(),
            policy=PolicyEngine(rules),
            time=clock,
        )
        if not result.success:
            logger.warning("Admin bootstrap skipped: %s", result.error)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()

    # Fail fast on bad rules or environment
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
        prepare_storage(settings, rules)
        logger.info("Rules loaded from %s", settings.rules_path)
    except (FileNotFoundError, ValueError, ConfigError, RuntimeError) as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    yield


app = FastAPI(
    title="CGWise API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from cgwise.api.routes import (  # noqa: E402
    admin_access_requests,
    admin_calculators,
    admin_logs,
    admin_settings,
    admin_users,
    auth,
    calculations,
    calculators,
    guest,
    public,
)

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(calculators.router, prefix="/api/calculators", tags=["Calculators"])
app.include_router(calculations.router, prefix="/api/calculations", tags=["Calculations"])
app.include_router(guest.router, prefix="/api/guest", tags=["Guest"])
app.include_router(public.router, prefix="/api/public", tags=["Public"])
app.include_router(
    admin_calculators.router, prefix="/api/admin/calculators", tags=["Admin Calculators"]
)
app.include_router(admin_users.router, prefix="/api/admin/users", tags=["Admin Users"])
app.include_router(
    admin_access_requests.router,
    prefix="/api/admin/access-requests",
    tags=["Admin Access Requests"],
)
app.include_router(admin_settings.router, prefix="/api/admin/settings", tags=["Admin Settings"])
app.include_router(admin_logs.router, prefix="/api/admin", tags=["Admin Logs"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    return {"status": "ok", "service": "api"}
