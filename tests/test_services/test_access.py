"""
Tests for the pure access decision in ``wematch.access``.

``decide`` has no application dependencies, so these run without the
app fixtures.
"""

import pytest

from wematch.access import Access, AccessContext, RouteClass, decide
from wematch.models.enums import UserRole
from wematch.models.user import User


class TestDecide:
    """Role x route classification table."""

    @pytest.mark.parametrize("role", [None, *UserRole])
    def test_public_routes_allow_everyone(self, role):
        assert decide(role, RouteClass.PUBLIC) is Access.PUBLIC_SCOPE

    @pytest.mark.parametrize(
        "route", [RouteClass.SELF, RouteClass.OWNER, RouteClass.ADMIN]
    )
    def test_anonymous_is_denied_outside_public(self, route):
        assert decide(None, route) is Access.DENY

    @pytest.mark.parametrize("role", list(UserRole))
    def test_self_routes_are_owner_scoped_for_every_role(self, role):
        assert decide(role, RouteClass.SELF) is Access.OWNER_SCOPE

    def test_owner_routes(self):
        assert decide(UserRole.SUPER_ADMIN, RouteClass.OWNER) is Access.ADMIN_SCOPE
        assert decide(UserRole.ORGANIZATION, RouteClass.OWNER) is Access.OWNER_SCOPE
        assert decide(UserRole.USER, RouteClass.OWNER) is Access.DENY

    def test_admin_routes(self):
        assert decide(UserRole.SUPER_ADMIN, RouteClass.ADMIN) is Access.ADMIN_SCOPE
        assert decide(UserRole.ORGANIZATION, RouteClass.ADMIN) is Access.DENY
        assert decide(UserRole.USER, RouteClass.ADMIN) is Access.DENY


class TestAccessContext:
    def test_for_user_carries_scope(self):
        user = User(id=7, email="a@b.org", role=UserRole.ORGANIZATION)
        ctx = AccessContext.for_user(user, RouteClass.OWNER)

        assert ctx.user_id == 7
        assert ctx.is_owner_scoped
        assert not ctx.is_admin

    def test_for_user_rejects_denied_role(self):
        user = User(id=8, email="c@d.org", role=UserRole.USER)
        with pytest.raises(ValueError):
            AccessContext.for_user(user, RouteClass.ADMIN)

    def test_anonymous_public_context(self):
        ctx = AccessContext(principal=None, access=Access.PUBLIC_SCOPE)
        assert ctx.user_id is None
        assert ctx.is_public
