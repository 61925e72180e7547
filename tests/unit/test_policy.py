import pytest

from cgwise.domain.policy import PolicyEngine

SUPER_ADMIN = "dolevb@cgwheels.com"


def test_admin_has_everything(policy: PolicyEngine, admin_user) -> None:
    assert policy.is_admin(admin_user)
    assert policy.can_manage_users(admin_user)
    assert policy.can_manage_calculators(admin_user)
    assert policy.can_manage_settings(admin_user)
    assert policy.can_view_logs(admin_user)


def test_starter_permissions(policy: PolicyEngine, starter_user) -> None:
    assert not policy.is_admin(starter_user)
    assert policy.can_save_calculations(starter_user)
    assert policy.check_permission(starter_user, "calculations:delete")
    assert policy.check_permission(starter_user, "profile:update")
    assert not policy.can_manage_users(starter_user)
    assert not policy.can_manage_settings(starter_user)


def test_premium_matches_starter(policy: PolicyEngine, user_factory) -> None:
    premium = user_factory("p@example.com", role="premium")
    assert policy.can_save_calculations(premium)
    assert not policy.can_view_logs(premium)


def test_public_permissions_need_no_user(policy: PolicyEngine) -> None:
    assert policy.check_permission(None, "calculators:read")
    assert policy.check_permission(None, "calculators:evaluate")
    assert policy.check_permission(None, "guest:save")
    assert not policy.check_permission(None, "calculations:save")


@pytest.mark.parametrize("status", ["pending", "rejected", "suspended"])
def test_unapproved_users_have_no_role_permissions(
    policy: PolicyEngine, user_factory, status: str
) -> None:
    user = user_factory("u@example.com", role="admin", status=status)
    assert not policy.can_manage_users(user)
    assert not policy.can_save_calculations(user)


def test_super_admin_by_email(policy: PolicyEngine, user_factory) -> None:
    boss = user_factory(SUPER_ADMIN, role="starter", status="suspended")
    assert policy.is_super_admin(" DolevB@CGWheels.com ")
    assert policy.is_admin(boss)
    assert policy.can_manage_settings(boss)


def test_is_admin_none(policy: PolicyEngine) -> None:
    assert not policy.is_admin(None)
