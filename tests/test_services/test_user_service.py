"""
Tests for user_service and auth_service.
"""

from datetime import timedelta

import jwt
import pytest

from wematch.access import RouteClass
from wematch.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from wematch.extensions import db
from wematch.models.audit import AuditLog
from wematch.models.enums import UserRole
from wematch.models.user import User
from wematch.services import auth_service, skill_service, user_service
from wematch.services.query_service import Pagination

PASSWORD = "correct-horse-battery"


class TestUserService:
    def test_register_creates_plain_user(self, app):
        user = user_service.register("New.Person@Example.org", PASSWORD, "New", "Person")

        assert user.role is UserRole.USER
        assert user.email == "new.person@example.org"
        assert user.password_hash != PASSWORD
        assert "passwordHash" not in user.to_dict()

    def test_duplicate_email_conflicts_case_insensitively(self, regular_user):
        with pytest.raises(ConflictError):
            user_service.register("STUDENT@wematch.dev", PASSWORD, "Dup")

    def test_get_missing_user(self, app):
        with pytest.raises(NotFoundError):
            user_service.get_user(404)

    def test_list_hides_inactive_by_default(self, admin, regular_user, ctx_for):
        user_service.set_active(regular_user.id, False, ctx_for(admin, RouteClass.ADMIN))

        active = user_service.get_all_users(Pagination())
        everyone = user_service.get_all_users(Pagination(), include_inactive=True)

        assert regular_user.id not in {u.id for u in active.items}
        assert regular_user.id in {u.id for u in everyone.items}

    def test_role_change_is_audited(self, admin, regular_user, organization, ctx_for):
        user = user_service.update_user_role(
            regular_user.id,
            UserRole.ORGANIZATION,
            ctx_for(admin, RouteClass.ADMIN),
            organization_id=organization.id,
        )

        assert user.role is UserRole.ORGANIZATION
        assert user.organization_id == organization.id
        entry = (
            AuditLog.query.filter_by(entity_type="users", entity_id=user.id, action_type="UPDATE")
            .order_by(AuditLog.id.desc())
            .first()
        )
        assert entry is not None
        assert entry.user_id == admin.id

    def test_role_change_can_clear_organization(self, admin, org_user, ctx_for):
        user = user_service.update_user_role(
            org_user.id,
            UserRole.USER,
            ctx_for(admin, RouteClass.ADMIN),
            clear_organization=True,
        )
        assert user.organization_id is None

    def test_role_change_keeps_organization_by_default(
        self, admin, org_user, organization, ctx_for
    ):
        user = user_service.update_user_role(
            org_user.id, UserRole.USER, ctx_for(admin, RouteClass.ADMIN)
        )
        assert user.organization_id == organization.id

    def test_admin_cannot_demote_self(self, admin, ctx_for):
        with pytest.raises(ValidationError):
            user_service.update_user_role(
                admin.id, UserRole.USER, ctx_for(admin, RouteClass.ADMIN)
            )

    def test_delete_user_owning_skills_conflicts(self, admin, regular_user, ctx_for):
        skill_service.create_skill(
            {"skill_name": "Writing"}, ctx_for(regular_user, RouteClass.SELF)
        )
        with pytest.raises(ConflictError):
            user_service.delete_user(regular_user.id, ctx_for(admin, RouteClass.ADMIN))

    def test_delete_user(self, admin, regular_user, ctx_for):
        user_id = regular_user.id
        user_service.delete_user(user_id, ctx_for(admin, RouteClass.ADMIN))
        assert db.session.get(User, user_id) is None


class TestAuthService:
    def test_login_returns_token_for_user(self, regular_user):
        token, user = auth_service.login("student@wematch.dev", PASSWORD)

        assert user.id == regular_user.id
        assert user.last_login is not None
        assert auth_service.load_user_from_token(token).id == regular_user.id

    def test_login_is_audited(self, regular_user):
        auth_service.login("student@wematch.dev", PASSWORD)
        assert AuditLog.query.filter_by(
            action_type="LOGIN", user_id=regular_user.id
        ).count() == 1

    def test_wrong_password(self, regular_user):
        with pytest.raises(AuthenticationError):
            auth_service.login("student@wematch.dev", "not-the-password")

    def test_unknown_email(self, app):
        with pytest.raises(AuthenticationError):
            auth_service.login("ghost@wematch.dev", PASSWORD)

    def test_inactive_user_cannot_log_in(self, admin, regular_user, ctx_for):
        user_service.set_active(regular_user.id, False, ctx_for(admin, RouteClass.ADMIN))
        with pytest.raises(AuthorizationError):
            auth_service.login("student@wematch.dev", PASSWORD)

    def test_token_of_deactivated_user_is_rejected(self, admin, regular_user, ctx_for):
        token = auth_service.create_access_token(regular_user)
        user_service.set_active(regular_user.id, False, ctx_for(admin, RouteClass.ADMIN))
        with pytest.raises(AuthenticationError):
            auth_service.load_user_from_token(token)

    def test_expired_token(self, app, regular_user):
        app.config["ACCESS_TOKEN_EXPIRE_MINUTES"] = -1
        token = auth_service.create_access_token(regular_user)
        with pytest.raises(AuthenticationError):
            auth_service.decode_access_token(token)

    def test_token_signed_with_other_key(self, app, regular_user):
        forged = jwt.encode(
            {"sub": str(regular_user.id), "type": "access"},
            "someone-elses-key",
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            auth_service.decode_access_token(forged)

    @pytest.mark.parametrize("header", ["Token abc", "Bearer", "Bearer   "])
    def test_malformed_bearer_header(self, header):
        with pytest.raises(AuthenticationError):
            auth_service.parse_bearer_header(header)

    def test_missing_header_is_anonymous(self):
        assert auth_service.parse_bearer_header(None) is None
        assert auth_service.parse_bearer_header("") is None

    def test_token_lifetime_follows_config(self, app, regular_user):
        token = auth_service.create_access_token(regular_user)
        claims = auth_service.decode_access_token(token)
        lifetime = timedelta(seconds=claims["exp"] - claims["iat"])
        assert lifetime == timedelta(minutes=app.config["ACCESS_TOKEN_EXPIRE_MINUTES"])
