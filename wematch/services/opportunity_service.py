"""
Opportunity service — organization-created and user-created postings.

Two ownership paths share one table:

  - Admin path (``/opportunities``): SUPER_ADMIN callers post on behalf
    of an organization and may change or delete any opportunity.
  - By-user path (``/opportunities/byUser``): the caller owns what it
    posts.  Under owner scope every lookup is filtered by the caller's
    id, so another user's opportunity is reported as not found.

The public listing is read-only and unscoped.  Images go through the
storage service; only the returned reference is stored, and a replaced
or deleted image is removed after the commit succeeds.
"""

import logging

from werkzeug.datastructures import FileStorage

from wematch.access import AccessContext
from wematch.exceptions import NotFoundError, ValidationError
from wematch.extensions import db
from wematch.models.enums import Category, ExperienceLevel, OpportunityType, PaymentType
from wematch.models.opportunity import Opportunity
from wematch.models.organization import Organization
from wematch.services import audit_service, storage_service
from wematch.services.query_service import (
    OpportunityFilter,
    Page,
    Pagination,
    coerce_enum,
    search_opportunities,
)

logger = logging.getLogger(__name__)

# Columns a create/update payload may set.  Ownership never changes
# after creation, so the owner columns are not listed.
EDITABLE_FIELDS = (
    "title",
    "description",
    "category",
    "opportunity_type",
    "experience_level",
    "payment_type",
    "location",
)

_ENUM_FIELDS = {
    "category": (Category, "category"),
    "opportunity_type": (OpportunityType, "opportunityType"),
    "experience_level": (ExperienceLevel, "experienceLevel"),
    "payment_type": (PaymentType, "paymentType"),
}


def _clean(data: dict) -> dict:
    """Keep editable fields and coerce enum values to members."""
    cleaned = {key: value for key, value in data.items() if key in EDITABLE_FIELDS}
    for key, (enum_cls, public_name) in _ENUM_FIELDS.items():
        if key in cleaned:
            cleaned[key] = coerce_enum(enum_cls, cleaned[key], public_name)
    return cleaned


def _snapshot(opportunity: Opportunity) -> dict:
    return opportunity.to_dict()


# -- Internal create / update / delete -------------------------------------


def _create(
    data: dict,
    ctx: AccessContext,
    image: FileStorage | None,
    organization_id: int | None = None,
    user_id: int | None = None,
) -> Opportunity:
    fields = _clean(data)
    missing = [key for key in EDITABLE_FIELDS if fields.get(key) in (None, "")]
    if missing:
        raise ValidationError(
            "Missing required fields.",
            details={key: ["This field is required."] for key in missing},
        )

    reference = storage_service.save_image(image)
    try:
        opportunity = Opportunity(
            **fields,
            image=reference,
            organization_id=organization_id,
            user_id=user_id,
        )
        db.session.add(opportunity)
        db.session.flush()

        audit_service.log_change(
            user_id=ctx.user_id,
            action_type="CREATE",
            entity_type="opportunities",
            entity_id=opportunity.id,
            new_value=_snapshot(opportunity),
        )
        db.session.commit()
    except Exception:
        # Do not leave an orphaned upload behind a failed insert.
        db.session.rollback()
        storage_service.delete_image(reference)
        raise

    logger.info(
        "Created opportunity %d (%s) by user %s",
        opportunity.id,
        opportunity.owner_kind,
        ctx.user_id,
    )
    return opportunity


def _update(
    opportunity: Opportunity,
    changes: dict,
    ctx: AccessContext,
    image: FileStorage | None,
) -> Opportunity:
    changes = _clean(changes)
    for key, value in changes.items():
        if value in (None, ""):
            raise ValidationError(
                f"{key} cannot be empty.", details={key: ["This field is required."]}
            )

    previous = {key: getattr(opportunity, key) for key in changes}
    new_reference = storage_service.save_image(image)
    old_reference = opportunity.image if new_reference else None

    try:
        for key, value in changes.items():
            setattr(opportunity, key, value)
        if new_reference:
            previous["image"] = opportunity.image
            opportunity.image = new_reference
            changes["image"] = new_reference

        audit_service.log_change(
            user_id=ctx.user_id,
            action_type="UPDATE",
            entity_type="opportunities",
            entity_id=opportunity.id,
            previous_value=previous,
            new_value=changes,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        storage_service.delete_image(new_reference)
        raise

    storage_service.delete_image(old_reference)
    logger.info("Updated opportunity ID %d", opportunity.id)
    return opportunity


def _delete(opportunity: Opportunity, ctx: AccessContext) -> None:
    previous = _snapshot(opportunity)
    opportunity_id = opportunity.id
    reference = opportunity.image

    db.session.delete(opportunity)
    audit_service.log_change(
        user_id=ctx.user_id,
        action_type="DELETE",
        entity_type="opportunities",
        entity_id=opportunity_id,
        previous_value=previous,
    )
    db.session.commit()

    storage_service.delete_image(reference)
    logger.info("Deleted opportunity ID %d", opportunity_id)


# -- Lookups ---------------------------------------------------------------


def get_opportunity(opportunity_id: int) -> Opportunity:
    """
    Return any opportunity by primary key (admin and public reads).

    Raises:
        NotFoundError: If no such opportunity exists.
    """
    opportunity = db.session.get(Opportunity, opportunity_id)
    if opportunity is None:
        raise NotFoundError("Opportunity not found.")
    return opportunity


def _by_user_query(ctx: AccessContext):
    """Opportunities reachable on the by-user path for this caller."""
    if ctx.is_admin:
        return Opportunity.query
    return Opportunity.query.filter(Opportunity.user_id == ctx.user_id)


def get_for_user(opportunity_id: int, ctx: AccessContext) -> Opportunity:
    """
    Return an opportunity on the by-user path.

    Raises:
        NotFoundError: If the id is absent or the caller does not own it.
    """
    opportunity = _by_user_query(ctx).filter(Opportunity.id == opportunity_id).first()
    if opportunity is None:
        raise NotFoundError("Opportunity not found.")
    return opportunity


# -- Admin path ------------------------------------------------------------


def _resolve_organization_id(requested: int | None, ctx: AccessContext) -> int:
    organization_id = requested
    if organization_id is None and ctx.principal is not None:
        organization_id = ctx.principal.organization_id
    if organization_id is None:
        raise ValidationError(
            "organizationId is required when your account has no organization.",
            details={"organizationId": ["This field is required."]},
        )
    if db.session.get(Organization, organization_id) is None:
        raise ValidationError(
            f"Organization {organization_id} does not exist.",
            details={"organizationId": [str(organization_id)]},
        )
    return organization_id


def create_for_organization(
    data: dict,
    ctx: AccessContext,
    image: FileStorage | None = None,
) -> Opportunity:
    """
    Create an organization-owned opportunity.

    The organization is ``data['organization_id']`` when given,
    otherwise the caller's own organization.

    Raises:
        ValidationError: Missing fields, bad enum values, a bad image,
                         or no resolvable organization.
    """
    organization_id = _resolve_organization_id(data.get("organization_id"), ctx)
    return _create(data, ctx, image, organization_id=organization_id)


def list_for_organization(
    filters: OpportunityFilter,
    pagination: Pagination,
    ctx: AccessContext,
) -> Page:
    """
    List one organization's opportunities with filtering.

    ``filters.organization_id`` selects the organization and defaults to
    the caller's own.
    """
    organization_id = _resolve_organization_id(filters.organization_id, ctx)
    filters.organization_id = organization_id
    return search_opportunities(filters, pagination)


def update(
    opportunity_id: int,
    changes: dict,
    ctx: AccessContext,
    image: FileStorage | None = None,
) -> Opportunity:
    """Update any opportunity (admin scope)."""
    return _update(get_opportunity(opportunity_id), changes, ctx, image)


def delete(opportunity_id: int, ctx: AccessContext) -> None:
    """Delete any opportunity (admin scope)."""
    _delete(get_opportunity(opportunity_id), ctx)


# -- Public path -----------------------------------------------------------


def list_public(filters: OpportunityFilter, pagination: Pagination) -> Page:
    """Filtered, paginated listing of every opportunity (read-only)."""
    return search_opportunities(filters, pagination)


# -- By-user path ----------------------------------------------------------


def create_for_user(
    data: dict,
    ctx: AccessContext,
    image: FileStorage | None = None,
) -> Opportunity:
    """Create an opportunity owned by the calling user."""
    return _create(data, ctx, image, user_id=ctx.user_id)


def list_for_user(
    filters: OpportunityFilter,
    pagination: Pagination,
    ctx: AccessContext,
) -> Page:
    """
    List by-user opportunities: the caller's own, or every user-created
    opportunity under admin scope.
    """
    if ctx.is_admin:
        base = Opportunity.query.filter(Opportunity.user_id.isnot(None))
    else:
        base = Opportunity.query.filter(Opportunity.user_id == ctx.user_id)
    return search_opportunities(filters, pagination, base_query=base)


def update_for_user(
    opportunity_id: int,
    changes: dict,
    ctx: AccessContext,
    image: FileStorage | None = None,
) -> Opportunity:
    """Update an opportunity on the by-user path (not found if not owned)."""
    return _update(get_for_user(opportunity_id, ctx), changes, ctx, image)


def delete_for_user(opportunity_id: int, ctx: AccessContext) -> None:
    """Delete an opportunity on the by-user path (not found if not owned)."""
    _delete(get_for_user(opportunity_id, ctx), ctx)
