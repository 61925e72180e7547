from pathlib import Path

import pytest
import yaml

from cgwise.rules.loader import load_rules
from cgwise.rules.models import Rules


def test_load_project_rules(rules: Rules) -> None:
    assert rules.project.slug == "cgwise"
    assert rules.auth.lockout.lockout_minutes == 15
    assert rules.auth.sessions.ttl_minutes == 1440
    assert rules.rbac.roles["admin"] == ["*"]
    assert rules.guest.retention_days == 7
    assert rules.rate_limits.login.max_attempts == 10
    assert rules.rate_limits.request_access.max_requests == 5


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("project: [unclosed", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(path)


def test_schema_violation(tmp_path: Path) -> None:
    data = yaml.safe_load(Path("rules.yaml").read_text(encoding="utf-8"))
    data["auth"]["sessions"]["ttl_minutes"] = 0
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    with pytest.raises(ValueError, match="validation failed"):
        load_rules(path)


def test_missing_required_section(tmp_path: Path) -> None:
    data = yaml.safe_load(Path("rules.yaml").read_text(encoding="utf-8"))
    data["project"]["required_sections"].append("billing")
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    with pytest.raises(ValueError, match="billing"):
        load_rules(path)
