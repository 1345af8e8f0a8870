"""
Enumerations shared by models, forms and the query builder.

Members are stored by name (``db.Enum``) and serialized by value; the
two are identical so clients see the same strings they filter with.
"""

import enum


class UserRole(str, enum.Enum):
    """Application role carried by every principal."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ORGANIZATION = "ORGANIZATION"
    USER = "USER"


class Category(str, enum.Enum):
    TECH = "TECH"
    EDUCATION = "EDUCATION"
    HEALTHCARE = "HEALTHCARE"
    FINANCE = "FINANCE"
    DESIGN = "DESIGN"
    MARKETING = "MARKETING"
    NONPROFIT = "NONPROFIT"
    OTHER = "OTHER"


class OpportunityType(str, enum.Enum):
    JOB = "JOB"
    INTERNSHIP = "INTERNSHIP"
    VOLUNTEER = "VOLUNTEER"
    FELLOWSHIP = "FELLOWSHIP"
    SCHOLARSHIP = "SCHOLARSHIP"
    COMPETITION = "COMPETITION"


class ExperienceLevel(str, enum.Enum):
    ENTRY = "ENTRY"
    JUNIOR = "JUNIOR"
    MID = "MID"
    SENIOR = "SENIOR"
    EXPERT = "EXPERT"


class PaymentType(str, enum.Enum):
    PAID = "PAID"
    UNPAID = "UNPAID"
    STIPEND = "STIPEND"


def choices_for(enum_cls: type[enum.Enum]) -> list[tuple[str, str]]:
    """Return ``(value, label)`` pairs for a WTForms SelectField."""
    return [(member.value, member.value) for member in enum_cls]
