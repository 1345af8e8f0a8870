"""
Model package — imports all models so Alembic and SQLAlchemy can
discover them automatically when ``flask db`` commands are run.

  - organization.py -> organizations
  - user.py         -> users
  - skill.py        -> skills
  - opportunity.py  -> opportunities
  - audit.py        -> audit_log
"""

from wematch.models.audit import AuditLog  # noqa: F401
from wematch.models.enums import (  # noqa: F401
    Category,
    ExperienceLevel,
    OpportunityType,
    PaymentType,
    UserRole,
)
from wematch.models.opportunity import Opportunity  # noqa: F401
from wematch.models.organization import Organization  # noqa: F401
from wematch.models.skill import Skill  # noqa: F401
from wematch.models.user import User  # noqa: F401
