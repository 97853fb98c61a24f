from typing import Iterable

from intern_portal.errors import Forbidden
from intern_portal.users.models.user import User, UserRole

CAPABILITIES = {
    "upload": frozenset({UserRole.INTERN}),
    "review": frozenset({UserRole.HR, UserRole.SUPER_ADMIN}),
    "view_all": frozenset({UserRole.HR, UserRole.SUPER_ADMIN}),
    "broadcast": frozenset({UserRole.HR, UserRole.SUPER_ADMIN}),
    "manage_users": frozenset({UserRole.SUPER_ADMIN}),
    "purge": frozenset({UserRole.SUPER_ADMIN}),
}


class RoleAuthorizer:
    """Role membership only. Record ownership is the caller's job."""

    @staticmethod
    def roles_for(capability: str) -> frozenset:
        try:
            return CAPABILITIES[capability]
        except KeyError:
            raise ValueError(f"Unknown capability '{capability}'")

    @staticmethod
    def allows(user: User, roles: Iterable[UserRole]) -> bool:
        return user.role in set(roles)

    @classmethod
    def require(cls, user: User, roles: Iterable[UserRole]) -> User:
        roles = set(roles)
        if not cls.allows(user, roles):
            allowed = ", ".join(sorted(r.value for r in roles))
            raise Forbidden(
                f"User with role '{user.role.value}' cannot perform this action (requires: {allowed})",
                code="INSUFFICIENT_ROLE",
            )
        return user

    @classmethod
    def require_capability(cls, user: User, capability: str) -> User:
        return cls.require(user, cls.roles_for(capability))
