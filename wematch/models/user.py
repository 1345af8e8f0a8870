"""
Principal model — application users.

Users authenticate with email and password and carry exactly one
``UserRole``.  ``ORGANIZATION`` users may be linked to the
organization they post for; that link decides which organization
profile they are allowed to edit.

Role = what you can do.  Ownership = what you can change.
"""

from flask_login import UserMixin

from wematch.extensions import db
from wematch.models.enums import UserRole
from wematch.models.mixins import TimestampMixin, isoformat


class User(UserMixin, TimestampMixin, db.Model):
    """
    Application user record.

    Inherits from ``UserMixin`` to satisfy Flask-Login requirements
    (``is_authenticated``, ``get_id``).  ``is_active`` is a real column
    so deactivated users are rejected by the request loader.
    """

    # ``user`` is a reserved word in PostgreSQL.
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False, default="")
    role = db.Column(
        db.Enum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.USER,
    )
    organization_id = db.Column(
        db.Integer,
        db.ForeignKey("organizations.id"),
        nullable=True,
        index=True,
    )
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login = db.Column(db.DateTime, nullable=True)

    # -- Relationships -----------------------------------------------------
    organization = db.relationship("Organization", back_populates="members")
    skills = db.relationship("Skill", back_populates="user", lazy="dynamic")
    opportunities = db.relationship(
        "Opportunity", back_populates="user", lazy="dynamic"
    )

    @property
    def full_name(self) -> str:
        """Return the user's full display name."""
        return f"{self.first_name} {self.last_name}".strip()

    def has_role(self, *roles: UserRole) -> bool:
        """Check if the user has any of the given roles."""
        return self.role in roles

    def to_dict(self) -> dict:
        """Public representation; never includes the password hash."""
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role.value,
            "organizationId": self.organization_id,
            "isActive": self.is_active,
            "lastLogin": isoformat(self.last_login),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.email} role={self.role.value if self.role else None}>"
