from cgwise.domain.entities import User
from cgwise.rules.models import Rules


class PolicyEngine:
    def __init__(self, rules: Rules):
        self.rules = rules

    def is_super_admin(self, email: str) -> bool:
        return email.strip().lower() == self.rules.auth.super_admin_email.lower()

    def is_admin(self, user: User | None) -> bool:
        if user is None:
            return False
        return user.role == "admin" or self.is_super_admin(user.email)

    def check_permission(self, user: User | None, action: str) -> bool:
        """
        Check if the user may perform the action.

        Order of precedence:
        1. Public permissions
        2. Role permissions of an approved user (super-admin always allowed)
        """
        if self._matches(action, self.rules.rbac.public_permissions):
            return True

        if not user:
            return False

        if self.is_super_admin(user.email):
            return True

        if user.status != "approved":
            return False

        allowed_actions = self.rules.rbac.roles.get(user.role, [])
        return self._matches(action, allowed_actions)

    @staticmethod
    def _matches(action: str, allowed_actions: list[str]) -> bool:
        if "*" in allowed_actions or action in allowed_actions:
            return True
        # Scoped wildcard: "calculations:*" matches "calculations:save"
        if ":" in action:
            scope = action.split(":")[0]
            return f"{scope}:*" in allowed_actions
        return False

    def can_manage_users(self, user: User) -> bool:
        return self.check_permission(user, "users:manage")

    def can_manage_calculators(self, user: User) -> bool:
        return self.check_permission(user, "calculators:manage")

    def can_manage_settings(self, user: User) -> bool:
        return self.check_permission(user, "settings:manage")

    def can_view_logs(self, user: User) -> bool:
        return self.check_permission(user, "logs:read")

    def can_save_calculations(self, user: User) -> bool:
        return self.check_permission(user, "calculations:save")
