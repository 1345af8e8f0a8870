"""
Role-scoped access decisions.

Every route is classified by who may call it.  ``decide()`` maps the
caller's role and the route classification to an ``Access`` outcome;
it has no state and never touches the request, so it can be tested
without an application context.

    Classification   Allowed roles               Outcome
    --------------   -------------------------   ---------------------------
    PUBLIC           anyone, even anonymous      PUBLIC_SCOPE
    SELF             any authenticated role      OWNER_SCOPE
    OWNER            SUPER_ADMIN, ORGANIZATION   ADMIN_SCOPE / OWNER_SCOPE
    ADMIN            SUPER_ADMIN                 ADMIN_SCOPE

Allowed calls carry an ``AccessContext`` into the service layer, which
applies the ownership filter for ``OWNER_SCOPE``.
"""

import enum
from dataclasses import dataclass

from wematch.models.enums import UserRole
from wematch.models.user import User


class RouteClass(enum.Enum):
    """Who a route is meant for."""

    PUBLIC = "public"
    SELF = "self"
    OWNER = "owner"
    ADMIN = "admin"


class Access(enum.Enum):
    """Outcome of an access decision."""

    DENY = "deny"
    ADMIN_SCOPE = "admin"
    OWNER_SCOPE = "owner"
    PUBLIC_SCOPE = "public"


# Roles accepted per classification; None means no role is required.
ROUTE_ROLES: dict[RouteClass, frozenset[UserRole] | None] = {
    RouteClass.PUBLIC: None,
    RouteClass.SELF: frozenset(UserRole),
    RouteClass.OWNER: frozenset({UserRole.SUPER_ADMIN, UserRole.ORGANIZATION}),
    RouteClass.ADMIN: frozenset({UserRole.SUPER_ADMIN}),
}


def decide(role: UserRole | None, route: RouteClass) -> Access:
    """
    Decide whether a caller with ``role`` may use a ``route``.

    Args:
        role:  The caller's role, or None for an anonymous caller.
        route: The classification of the route being called.

    Returns:
        ``Access.DENY`` or the scope the call proceeds with.
    """
    if route is RouteClass.PUBLIC:
        return Access.PUBLIC_SCOPE

    allowed = ROUTE_ROLES[route]
    if role is None or role not in allowed:
        return Access.DENY

    # SELF routes act on the caller's own records, admins included.
    if route is RouteClass.SELF:
        return Access.OWNER_SCOPE
    if role is UserRole.SUPER_ADMIN:
        return Access.ADMIN_SCOPE
    return Access.OWNER_SCOPE


@dataclass(frozen=True)
class AccessContext:
    """
    The caller and scope a service call runs under.

    ``principal`` is None only for anonymous callers of PUBLIC routes.
    """

    principal: User | None
    access: Access

    @property
    def user_id(self) -> int | None:
        return self.principal.id if self.principal is not None else None

    @property
    def is_admin(self) -> bool:
        return self.access is Access.ADMIN_SCOPE

    @property
    def is_owner_scoped(self) -> bool:
        return self.access is Access.OWNER_SCOPE

    @property
    def is_public(self) -> bool:
        return self.access is Access.PUBLIC_SCOPE

    @classmethod
    def for_user(cls, user: User, route: RouteClass) -> "AccessContext":
        """
        Build a context for a known user, e.g. from CLI code or tests.

        Raises:
            ValueError: If the user's role does not allow the route.
        """
        access = decide(user.role, route)
        if access is Access.DENY:
            raise ValueError(
                f"Role {user.role.value} may not use {route.value} routes."
            )
        return cls(principal=user, access=access)
