"""
Query service — filter, sort and paginate listings.

``build_opportunity_query`` turns an ``OpportunityFilter`` into a single
SQLAlchemy query: the supplied predicates are ANDed together (absent
fields add nothing), ordering comes from the ``sort`` key, and
``paginate`` applies LIMIT/OFFSET and counts the unpaged result.

Bad input is rejected with ``ValidationError`` rather than clamped or
ignored: a page below 1, a limit outside ``1..MAX_PAGE_LIMIT``, an
unknown sort field or direction, an enum value outside its enum, and a
``createdAfter`` later than ``createdBefore``.
"""

import enum
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from flask import current_app

from wematch.exceptions import ValidationError
from wematch.models.enums import Category, ExperienceLevel, OpportunityType, PaymentType
from wematch.models.mixins import to_naive_utc
from wematch.models.opportunity import Opportunity

DEFAULT_SORT = "createdAt:desc"

# Public sort keys mapped to the columns they order by.
SORTABLE_FIELDS = {
    "createdAt": Opportunity.created_at,
    "updatedAt": Opportunity.updated_at,
    "title": Opportunity.title,
    "location": Opportunity.location,
    "category": Opportunity.category,
    "opportunityType": Opportunity.opportunity_type,
    "experienceLevel": Opportunity.experience_level,
    "paymentType": Opportunity.payment_type,
}

_DIRECTIONS = {"asc": False, "desc": True}


# -- Pagination ------------------------------------------------------------


@dataclass(frozen=True)
class Pagination:
    """A validated ``page``/``limit`` pair (1-indexed pages)."""

    page: int = 1
    limit: int = 10

    def __post_init__(self):
        if self.page < 1:
            raise ValidationError(
                "page must be 1 or greater.", details={"page": [str(self.page)]}
            )
        if self.limit < 1:
            raise ValidationError(
                "limit must be 1 or greater.", details={"limit": [str(self.limit)]}
            )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    """One page of results plus the size of the whole filtered set."""

    items: list
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    def to_dict(self, serialize: Callable[[Any], dict] | None = None) -> dict:
        serialize = serialize or (lambda item: item.to_dict())
        return {
            "items": [serialize(item) for item in self.items],
            "meta": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "pages": self.pages,
            },
        }


def paginate(query, pagination: Pagination) -> Page:
    """
    Run ``query`` for one page and count the unpaged result.

    Raises:
        ValidationError: If the limit exceeds ``MAX_PAGE_LIMIT``.
    """
    max_limit = current_app.config.get("MAX_PAGE_LIMIT", 100)
    if pagination.limit > max_limit:
        raise ValidationError(
            f"limit must not exceed {max_limit}.",
            details={"limit": [str(pagination.limit)]},
        )

    result = query.paginate(
        page=pagination.page,
        per_page=pagination.limit,
        error_out=False,
        count=True,
    )
    return Page(
        items=list(result.items),
        total=result.total or 0,
        page=pagination.page,
        limit=pagination.limit,
    )


# -- Opportunity filters ---------------------------------------------------


def coerce_enum(enum_cls: type[enum.Enum], value, field_name: str):
    """Return ``value`` as a member of ``enum_cls``, or raise."""
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).upper())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {field_name} '{value}'. Allowed values: {allowed}.",
            details={field_name: [str(value)]},
        ) from exc


@dataclass
class OpportunityFilter:
    """
    Optional predicates for an opportunity listing.

    ``name`` and ``location`` match case-insensitive substrings; the
    enum fields, ``organization_id`` and the date bounds match exactly
    or inclusively.  Enum fields accept members or their string values.
    """

    name: str | None = None
    location: str | None = None
    category: Category | None = None
    opportunity_type: OpportunityType | None = None
    experience_level: ExperienceLevel | None = None
    payment_type: PaymentType | None = None
    organization_id: int | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None
    sort: str | None = None
    _sort_key: tuple[str, bool] = field(init=False, repr=False)

    def __post_init__(self):
        self.category = coerce_enum(Category, self.category, "category")
        self.opportunity_type = coerce_enum(
            OpportunityType, self.opportunity_type, "opportunityType"
        )
        self.experience_level = coerce_enum(
            ExperienceLevel, self.experience_level, "experienceLevel"
        )
        self.payment_type = coerce_enum(PaymentType, self.payment_type, "paymentType")

        if self.created_after is not None:
            self.created_after = to_naive_utc(self.created_after)
        if self.created_before is not None:
            self.created_before = to_naive_utc(self.created_before)
        if (
            self.created_after is not None
            and self.created_before is not None
            and self.created_after > self.created_before
        ):
            raise ValidationError(
                "createdAfter must not be later than createdBefore.",
                details={
                    "createdAfter": [self.created_after.isoformat()],
                    "createdBefore": [self.created_before.isoformat()],
                },
            )

        self._sort_key = parse_sort(self.sort)


def parse_sort(raw: str | None) -> tuple[str, bool]:
    """
    Parse ``field:direction`` into ``(field, descending)``.

    The direction is optional and defaults to ascending.  A missing or
    blank value means ``createdAt:desc``.

    Raises:
        ValidationError: For unknown fields, unknown directions, or a
                         malformed value.
    """
    if raw is None or not raw.strip():
        raw = DEFAULT_SORT

    parts = raw.strip().split(":")
    if len(parts) > 2 or not parts[0].strip():
        raise ValidationError(
            f"Invalid sort '{raw}'. Use field:direction, e.g. {DEFAULT_SORT}.",
            details={"sort": [raw]},
        )

    field_name = parts[0].strip()
    if field_name not in SORTABLE_FIELDS:
        allowed = ", ".join(SORTABLE_FIELDS)
        raise ValidationError(
            f"Unknown sort field '{field_name}'. Sortable fields: {allowed}.",
            details={"sort": [raw]},
        )

    direction = parts[1].strip().lower() if len(parts) == 2 else "asc"
    if direction not in _DIRECTIONS:
        raise ValidationError(
            f"Unknown sort direction '{direction}'. Use asc or desc.",
            details={"sort": [raw]},
        )
    return field_name, _DIRECTIONS[direction]


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(column, text: str):
    """Case-insensitive substring match on ``column``; wildcards are literal."""
    return column.ilike(f"%{_escape_like(text)}%", escape="\\")


def build_opportunity_query(filters: OpportunityFilter | None = None, base_query=None):
    """
    Build the filtered, ordered opportunity query.

    Args:
        filters:    Predicates to apply; None means no constraint.
        base_query: A query to refine (e.g. already limited to one
                    owner).  Defaults to all opportunities.

    Returns:
        A query ordered by the requested sort, with ``id`` as the
        tie-breaker so pages never overlap.
    """
    filters = filters or OpportunityFilter()
    query = base_query if base_query is not None else Opportunity.query

    conditions = []
    if filters.name:
        conditions.append(contains(Opportunity.title, filters.name))
    if filters.location:
        conditions.append(contains(Opportunity.location, filters.location))
    if filters.category is not None:
        conditions.append(Opportunity.category == filters.category)
    if filters.opportunity_type is not None:
        conditions.append(Opportunity.opportunity_type == filters.opportunity_type)
    if filters.experience_level is not None:
        conditions.append(Opportunity.experience_level == filters.experience_level)
    if filters.payment_type is not None:
        conditions.append(Opportunity.payment_type == filters.payment_type)
    if filters.organization_id is not None:
        conditions.append(Opportunity.organization_id == filters.organization_id)
    if filters.created_after is not None:
        conditions.append(Opportunity.created_at >= filters.created_after)
    if filters.created_before is not None:
        conditions.append(Opportunity.created_at <= filters.created_before)

    if conditions:
        query = query.filter(*conditions)

    field_name, descending = filters._sort_key
    column = SORTABLE_FIELDS[field_name]
    if descending:
        return query.order_by(column.desc(), Opportunity.id.desc())
    return query.order_by(column.asc(), Opportunity.id.asc())


def search_opportunities(
    filters: OpportunityFilter | None,
    pagination: Pagination,
    base_query=None,
) -> Page:
    """Filter, order and paginate opportunities in one call."""
    return paginate(build_opportunity_query(filters, base_query), pagination)
