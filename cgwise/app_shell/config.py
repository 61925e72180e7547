import logging
import os
from pathlib import Path

from cgwise.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Startup configuration is unusable."""


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.
    Raises ConfigError describing every problem found.
    """
    ops = rules.ops
    problems: list[str] = []

    if ops.data_dir_required:
        if not data_dir.exists():
            data_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created data directory %s", data_dir)
        if not os.access(data_dir, os.W_OK):
            problems.append(f"data directory {data_dir} is not writable")

    missing = [name for name in ops.required_env if name not in os.environ]
    if missing:
        problems.append(f"missing required environment variables: {', '.join(missing)}")

    if problems:
        raise ConfigError("; ".join(problems))

    logger.info("Configuration validated (data dir %s)", data_dir)


def bootstrap_credentials(rules: Rules) -> tuple[str, str] | None:
    """
    Admin credentials from the environment, if bootstrap is enabled and all
    of its variables are set. Order follows ``required_env_when_enabled``.
    """
    boot = rules.ops.bootstrap_admin
    if not boot.enabled_if_no_users or len(boot.required_env_when_enabled) < 2:
        return None

    email_var, password_var = boot.required_env_when_enabled[:2]
    email = os.environ.get(email_var, "").strip()
    password = os.environ.get(password_var, "")
    if not email or not password:
        return None
    return email, password
