"""
User service — account lookup, registration and administration.

Self-service registration always creates ``USER`` accounts; admins can
provision any role, change roles, deactivate accounts, and hard-delete
accounts that no longer own any skills or opportunities.
"""

import logging

from sqlalchemy import func

from wematch.access import AccessContext
from wematch.exceptions import ConflictError, NotFoundError, ValidationError
from wematch.extensions import db
from wematch.models.enums import UserRole
from wematch.models.opportunity import Opportunity
from wematch.models.organization import Organization
from wematch.models.skill import Skill
from wematch.models.user import User
from wematch.security import hash_password
from wematch.services import audit_service
from wematch.services.query_service import Page, Pagination, paginate

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


# -- User lookup -----------------------------------------------------------


def get_user_by_id(user_id: int) -> User | None:
    """Return a user by primary key, or None if not found."""
    return db.session.get(User, user_id)


def get_user_by_email(email: str) -> User | None:
    """Return a user by email address (case-insensitive)."""
    return User.query.filter(func.lower(User.email) == normalize_email(email)).first()


def get_user(user_id: int) -> User:
    """
    Return a user by primary key.

    Raises:
        NotFoundError: If no such user exists.
    """
    user = get_user_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found.")
    return user


def get_all_users(
    pagination: Pagination,
    include_inactive: bool = False,
    role: UserRole | None = None,
) -> Page:
    """
    Return a page of users ordered by last name, then first name.

    Args:
        pagination:       Page and limit.
        include_inactive: If True, include deactivated users.
        role:             Optional role filter.
    """
    query = User.query.order_by(User.last_name, User.first_name, User.id)
    if not include_inactive:
        query = query.filter(User.is_active == True)  # noqa: E712
    if role is not None:
        query = query.filter(User.role == role)
    return paginate(query, pagination)


# -- User creation ---------------------------------------------------------


def _resolve_organization(organization_id: int | None) -> Organization | None:
    if organization_id is None:
        return None
    organization = db.session.get(Organization, organization_id)
    if organization is None:
        raise ValidationError(
            f"Organization {organization_id} does not exist.",
            details={"organizationId": [str(organization_id)]},
        )
    return organization


def create_user(
    email: str,
    password: str,
    first_name: str,
    last_name: str = "",
    role: UserRole = UserRole.USER,
    organization_id: int | None = None,
    created_by: int | None = None,
) -> User:
    """
    Create a new account.

    Args:
        email:           Login email; stored lower-cased.
        password:        Plain password; only the bcrypt hash is stored.
        first_name:      User's first name.
        last_name:       User's last name.
        role:            Role to assign (defaults to USER).
        organization_id: Organization the user posts for, if any.
        created_by:      ID of the admin creating the account, or None
                         for self-registration.

    Returns:
        The newly created User record.

    Raises:
        ConflictError:   If the email is already registered.
        ValidationError: If ``organization_id`` does not exist.
    """
    email = normalize_email(email)
    if get_user_by_email(email) is not None:
        raise ConflictError("Email is already registered.")

    _resolve_organization(organization_id)

    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name.strip(),
        last_name=(last_name or "").strip(),
        role=role,
        organization_id=organization_id,
    )
    db.session.add(user)
    db.session.flush()

    audit_service.log_change(
        user_id=created_by if created_by is not None else user.id,
        action_type="CREATE",
        entity_type="users",
        entity_id=user.id,
        new_value={
            "email": email,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "role": role.value,
            "organization_id": organization_id,
        },
    )
    db.session.commit()

    logger.info("Created user %s with role %s", email, role.value)
    return user


def register(email: str, password: str, first_name: str, last_name: str = "") -> User:
    """Self-service sign-up; always creates a ``USER`` account."""
    return create_user(email, password, first_name, last_name, role=UserRole.USER)


# -- Administration --------------------------------------------------------


def update_user_role(
    user_id: int,
    new_role: UserRole,
    ctx: AccessContext,
    organization_id: int | None = None,
    clear_organization: bool = False,
) -> User:
    """
    Change a user's role and, optionally, their organization link.

    ``organization_id`` links the user to that organization; None keeps
    the current link unless ``clear_organization`` removes it.

    Raises:
        NotFoundError:   If the user is not found.
        ValidationError: If ``organization_id`` does not exist, or an
                         admin tries to demote themselves.
    """
    user = get_user(user_id)
    if user.id == ctx.user_id and new_role is not UserRole.SUPER_ADMIN:
        raise ValidationError("You cannot remove your own admin role.")

    _resolve_organization(organization_id)

    previous = {"role": user.role.value, "organization_id": user.organization_id}
    user.role = new_role
    if clear_organization:
        user.organization_id = None
    elif organization_id is not None:
        user.organization_id = organization_id

    audit_service.log_change(
        user_id=ctx.user_id,
        action_type="UPDATE",
        entity_type="users",
        entity_id=user.id,
        previous_value=previous,
        new_value={"role": new_role.value, "organization_id": user.organization_id},
    )
    db.session.commit()

    logger.info(
        "Changed role for user %s: %s -> %s",
        user.email,
        previous["role"],
        new_role.value,
    )
    return user


def set_active(user_id: int, is_active: bool, ctx: AccessContext) -> User:
    """
    Deactivate or reactivate a user.  Deactivated users cannot log in
    and their existing tokens stop working.

    Raises:
        NotFoundError:   If the user is not found.
        ValidationError: If an admin tries to deactivate themselves.
    """
    user = get_user(user_id)
    if user.id == ctx.user_id and not is_active:
        raise ValidationError("You cannot deactivate your own account.")

    if user.is_active == is_active:
        return user

    user.is_active = is_active
    audit_service.log_change(
        user_id=ctx.user_id,
        action_type="UPDATE",
        entity_type="users",
        entity_id=user.id,
        previous_value={"is_active": not is_active},
        new_value={"is_active": is_active},
    )
    db.session.commit()

    logger.info("%s user %s", "Reactivated" if is_active else "Deactivated", user.email)
    return user


def delete_user(user_id: int, ctx: AccessContext) -> None:
    """
    Hard-delete a user who owns nothing.

    Skills and opportunities are never removed implicitly; the caller
    must delete them first.

    Raises:
        NotFoundError:   If the user is not found.
        ValidationError: If an admin tries to delete themselves.
        ConflictError:   If the user still owns skills or opportunities.
    """
    user = get_user(user_id)
    if user.id == ctx.user_id:
        raise ValidationError("You cannot delete your own account.")

    skill_count = Skill.query.filter(Skill.user_id == user.id).count()
    opportunity_count = Opportunity.query.filter(Opportunity.user_id == user.id).count()
    if skill_count or opportunity_count:
        raise ConflictError(
            "User still owns records; delete them first.",
            details={"skills": skill_count, "opportunities": opportunity_count},
        )

    previous = user.to_dict()
    db.session.delete(user)
    audit_service.log_change(
        user_id=ctx.user_id,
        action_type="DELETE",
        entity_type="users",
        entity_id=user_id,
        previous_value=previous,
    )
    db.session.commit()

    logger.info("Deleted user %s", previous["email"])
