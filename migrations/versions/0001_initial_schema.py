"""Initial schema: organizations, users, skills, opportunities, audit log

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

_USER_ROLE = sa.Enum("SUPER_ADMIN", "ORGANIZATION", "USER", name="user_role")
_CATEGORY = sa.Enum(
    "TECH",
    "EDUCATION",
    "HEALTHCARE",
    "FINANCE",
    "DESIGN",
    "MARKETING",
    "NONPROFIT",
    "OTHER",
    name="category",
)
_OPPORTUNITY_TYPE = sa.Enum(
    "JOB",
    "INTERNSHIP",
    "VOLUNTEER",
    "FELLOWSHIP",
    "SCHOLARSHIP",
    "COMPETITION",
    name="opportunity_type",
)
_EXPERIENCE_LEVEL = sa.Enum(
    "ENTRY", "JUNIOR", "MID", "SENIOR", "EXPERT", name="experience_level"
)
_PAYMENT_TYPE = sa.Enum("PAID", "UNPAID", "STIPEND", name="payment_type")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    """Create every table with its constraints and indexes."""
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("location", sa.String(length=200), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_organizations_created_at", "organizations", ["created_at"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("role", _USER_ROLE, nullable=False),
        sa.Column("organization_id", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_organization_id", "users", ["organization_id"])
    op.create_index("ix_users_created_at", "users", ["created_at"])

    op.create_table(
        "skills",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("skill_name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "skill_name", name="uq_skill_user_name"),
    )
    op.create_index("ix_skills_skill_name", "skills", ["skill_name"])
    op.create_index("ix_skills_user_id", "skills", ["user_id"])
    op.create_index("ix_skills_created_at", "skills", ["created_at"])

    op.create_table(
        "opportunities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", _CATEGORY, nullable=False),
        sa.Column("opportunity_type", _OPPORTUNITY_TYPE, nullable=False),
        sa.Column("experience_level", _EXPERIENCE_LEVEL, nullable=False),
        sa.Column("payment_type", _PAYMENT_TYPE, nullable=False),
        sa.Column("location", sa.String(length=200), nullable=False),
        sa.Column("image", sa.String(length=255), nullable=True),
        sa.Column("organization_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(organization_id IS NULL) <> (user_id IS NULL)",
            name="ck_opportunity_single_owner",
        ),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_opportunities_organization_id", "opportunities", ["organization_id"]
    )
    op.create_index("ix_opportunities_user_id", "opportunities", ["user_id"])
    op.create_index("ix_opportunities_created_at", "opportunities", ["created_at"])

    op.create_table(
        "audit_log",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("action_type", sa.String(length=50), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("previous_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_user_id", "audit_log", ["user_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])


def downgrade():
    """Drop every table in reverse dependency order."""
    op.drop_table("audit_log")
    op.drop_table("opportunities")
    op.drop_table("skills")
    op.drop_table("users")
    op.drop_table("organizations")

    bind = op.get_bind()
    for enum_type in (
        _PAYMENT_TYPE,
        _EXPERIENCE_LEVEL,
        _OPPORTUNITY_TYPE,
        _CATEGORY,
        _USER_ROLE,
    ):
        enum_type.drop(bind, checkfirst=True)
