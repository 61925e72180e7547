import argparse
import getpass
import logging
import sys
from pathlib import Path

from cgwise.adapters.auth.crypto import JWTAuthAdapter
from cgwise.adapters.clock import SystemClock
from cgwise.adapters.sqlite.repos import SQLiteGuestRepo, SQLiteUserRepo
from cgwise.api.deps import Settings
from cgwise.api.main import prepare_storage
from cgwise.app_shell.config import ConfigError, validate_ops_rules
from cgwise.components.auth import CreateAdminInput, run_create_admin
from cgwise.components.calculator import (
    BuiltinCatalog,
    EvaluateInput,
    ListCatalogInput,
    gauge_position,
    is_optimal,
    run_evaluate,
    run_list_catalog,
)
from cgwise.components.history import CleanupGuestSessionsInput, run_cleanup_guest_sessions
from cgwise.domain.policy import PolicyEngine
from cgwise.rules.loader import load_rules
from cgwise.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")


def get_rules(settings: Settings) -> Rules:
    if not Path(settings.rules_path).exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)
    return load_rules(Path(settings.rules_path))


def handle_init_db(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    try:
        validate_ops_rules(rules, settings.data_dir)
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)
    prepare_storage(settings, rules)
    print(f"Database ready at {settings.db_path}")


def handle_create_admin(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass("Password: ")
    result = run_create_admin(
        CreateAdminInput(email=args.email, name=args.name, password=password),
        user_repo=SQLiteUserRepo(settings.db_path),
        auth_adapter=JWTAuthAdapter(),
        policy=PolicyEngine(rules),
        time=SystemClock(),
    )
    if not result.success or result.user is None:
        logger.error("Could not create admin: %s", result.error)
        sys.exit(1)
    print(f"Admin ready: {result.user.email}")


def handle_list(args: argparse.Namespace) -> None:
    result = run_list_catalog(ListCatalogInput(category=args.category), catalog=BuiltinCatalog())
    for calc in result.calculators:
        keys = ", ".join(f.key for f in calc.inputs)
        print(f"{calc.id:<14} {calc.short_name:<8} {calc.name}  [{keys}]")


def handle_evaluate(args: argparse.Namespace) -> None:
    raw: dict[str, str] = {}
    for pair in args.values:
        key, sep, value = pair.partition("=")
        if not sep:
            logger.error("Expected key=value, got %r", pair)
            sys.exit(2)
        raw[key.strip()] = value

    result = run_evaluate(
        EvaluateInput(calculator_id=args.calculator, raw_values=raw, unit_system=args.units),
        catalog=BuiltinCatalog(),
    )
    if not result.success or result.result is None:
        logger.error("%s", result.errors[0].message)
        sys.exit(1)

    res = result.result
    if res.value is None:
        print(f"{res.label}: —")
        return

    print(f"{res.label}: {res.value:.6g} {res.unit.for_system(args.units)}".rstrip())
    gauge = gauge_position(res)
    if gauge is not None:
        band = "optimal" if is_optimal(res) else "outside"
        print(
            f"Gauge: {gauge.position:.2f} "
            f"(optimal {gauge.optimal_start:.2f}-{gauge.optimal_end:.2f}, {band})"
        )


def handle_cleanup_guests(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    days = args.days if args.days is not None else rules.guest.retention_days
    result = run_cleanup_guest_sessions(
        CleanupGuestSessionsInput(retention_days=days),
        repo=SQLiteGuestRepo(settings.db_path),
        time=SystemClock(),
    )
    print(f"Removed {result.deleted} guest sessions idle for more than {days} days.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CGWise grinding calculators CLI")
    parser.add_argument("--data-dir", help="Directory holding cgwise.db (default: $CGW_DATA_DIR)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Apply migrations and seed default calculators")

    admin_parser = subparsers.add_parser("create-admin", help="Create or promote an admin")
    admin_parser.add_argument("email")
    admin_parser.add_argument("--name", default="Administrator")
    admin_parser.add_argument("--password", help="Prompted for when omitted")

    list_parser = subparsers.add_parser("list", help="List built-in calculators")
    list_parser.add_argument("--category")

    eval_parser = subparsers.add_parser("evaluate", help="Evaluate a built-in calculator")
    eval_parser.add_argument("calculator", help="Calculator id, e.g. qw")
    eval_parser.add_argument("values", nargs="*", help="Inputs as key=value")
    eval_parser.add_argument("--units", choices=["metric", "imperial"], default="metric")

    cleanup_parser = subparsers.add_parser("cleanup-guests", help="Remove idle guest sessions")
    cleanup_parser.add_argument("--days", type=int, help="Override guest.retention_days")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.command == "list":
        handle_list(args)
        return
    if args.command == "evaluate":
        handle_evaluate(args)
        return

    settings = Settings(data_dir=args.data_dir)
    rules = get_rules(settings)

    if args.command == "init-db":
        handle_init_db(settings, rules, args)
    elif args.command == "create-admin":
        handle_create_admin(settings, rules, args)
    elif args.command == "cleanup-guests":
        handle_cleanup_guests(settings, rules, args)


if __name__ == "__main__":
    main()
