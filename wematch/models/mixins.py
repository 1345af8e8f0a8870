"""
Column helpers shared across models.

Timestamps are stored as naive UTC so that SQLite (tests, local
development) and PostgreSQL compare them the same way.
"""

from datetime import datetime, timezone

from wematch.extensions import db


def utcnow() -> datetime:
    """Return the current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def isoformat(value: datetime | None) -> str | None:
    """Serialize a stored UTC timestamp with an explicit ``Z`` suffix."""
    if value is None:
        return None
    return value.isoformat() + "Z"


class TimestampMixin:
    """Adds ``created_at`` / ``updated_at`` maintained by the ORM."""

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )
