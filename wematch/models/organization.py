"""
Organization model — the profile behind organization-created
opportunities.
"""

from wematch.extensions import db
from wematch.models.mixins import TimestampMixin, isoformat


class Organization(TimestampMixin, db.Model):
    """
    Organization profile.

    Owns zero or more opportunities and has zero or more member users.
    Neither relationship cascades: an organization that still owns
    opportunities or has members cannot be deleted.
    """

    __tablename__ = "organizations"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(200), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    website = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    location = db.Column(db.String(200), nullable=True)

    # -- Relationships -----------------------------------------------------
    members = db.relationship("User", back_populates="organization", lazy="dynamic")
    opportunities = db.relationship(
        "Opportunity", back_populates="organization", lazy="dynamic"
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "website": self.website,
            "email": self.email,
            "location": self.location,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Organization {self.id}: {self.name}>"
