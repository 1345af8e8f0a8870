"""
Organization service — organization profiles.

Anyone may browse organizations.  Admins create and delete them; an
``ORGANIZATION`` user may edit only the organization they belong to,
under the same not-found rule the other owner-scoped services use.
"""

import logging

from wematch.access import AccessContext
from wematch.exceptions import ConflictError, NotFoundError
from wematch.extensions import db
from wematch.models.opportunity import Opportunity
from wematch.models.organization import Organization
from wematch.models.user import User
from wematch.services import audit_service
from wematch.services.query_service import Page, Pagination, contains, paginate

logger = logging.getLogger(__name__)

# Columns an update payload may change.
EDITABLE_FIELDS = ("name", "description", "website", "email", "location")


def _ensure_unique_name(name: str, exclude_id: int | None = None) -> None:
    query = Organization.query.filter(Organization.name == name)
    if exclude_id is not None:
        query = query.filter(Organization.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"An organization named '{name}' already exists.")


def get_organization(organization_id: int) -> Organization:
    """
    Return an organization by primary key.

    Raises:
        NotFoundError: If no such organization exists.
    """
    organization = db.session.get(Organization, organization_id)
    if organization is None:
        raise NotFoundError("Organization not found.")
    return organization


def get_organizations(pagination: Pagination, name: str | None = None) -> Page:
    """Return a page of organizations ordered by name, optionally searched."""
    query = Organization.query.order_by(Organization.name, Organization.id)
    if name:
        query = query.filter(contains(Organization.name, name))
    return paginate(query, pagination)


def create_organization(data: dict, ctx: AccessContext) -> Organization:
    """
    Create an organization profile.

    Args:
        data: Field values; ``name`` is required.
        ctx:  Caller context (admin).

    Raises:
        ConflictError: If the name is taken.
    """
    _ensure_unique_name(data["name"])

    organization = Organization(
        **{key: data.get(key) for key in EDITABLE_FIELDS}
    )
    db.session.add(organization)
    db.session.flush()

    audit_service.log_change(
        user_id=ctx.user_id,
        action_type="CREATE",
        entity_type="organizations",
        entity_id=organization.id,
        new_value=organization.to_dict(),
    )
    db.session.commit()

    logger.info("Created organization %s", organization.name)
    return organization


def update_organization(
    organization_id: int, changes: dict, ctx: AccessContext
) -> Organization:
    """
    Apply ``changes`` to an organization.

    Owner-scoped callers may only edit their own organization; any
    other id is reported as not found.

    Raises:
        NotFoundError: If the organization is missing or out of scope.
        ConflictError: If the new name is taken.
    """
    if ctx.is_owner_scoped and ctx.principal.organization_id != organization_id:
        raise NotFoundError("Organization not found.")

    organization = get_organization(organization_id)

    changes = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
    if "name" in changes:
        _ensure_unique_name(changes["name"], exclude_id=organization.id)

    previous = {key: getattr(organization, key) for key in changes}
    for key, value in changes.items():
        setattr(organization, key, value)

    audit_service.log_change(
        user_id=ctx.user_id,
        action_type="UPDATE",
        entity_type="organizations",
        entity_id=organization.id,
        previous_value=previous,
        new_value=changes,
    )
    db.session.commit()

    logger.info("Updated organization ID %d", organization.id)
    return organization


def delete_organization(organization_id: int, ctx: AccessContext) -> None:
    """
    Delete an organization that has no opportunities and no members.

    Raises:
        NotFoundError: If the organization is missing.
        ConflictError: If it still owns opportunities or has members.
    """
    organization = get_organization(organization_id)

    opportunity_count = Opportunity.query.filter(
        Opportunity.organization_id == organization.id
    ).count()
    member_count = User.query.filter(User.organization_id == organization.id).count()
    if opportunity_count or member_count:
        raise ConflictError(
            "Organization is still in use.",
            details={"opportunities": opportunity_count, "members": member_count},
        )

    previous = organization.to_dict()
    db.session.delete(organization)
    audit_service.log_change(
        user_id=ctx.user_id,
        action_type="DELETE",
        entity_type="organizations",
        entity_id=organization_id,
        previous_value=previous,
    )
    db.session.commit()

    logger.info("Deleted organization %s", previous["name"])
