"""
Opportunity model — a job, internship, volunteer role, etc.

An opportunity is owned by exactly one organization *or* one user,
never both and never neither.  The database enforces this with a
CHECK constraint; services never change the owner after creation.
"""

from wematch.extensions import db
from wematch.models.enums import Category, ExperienceLevel, OpportunityType, PaymentType
from wematch.models.mixins import TimestampMixin, isoformat


class Opportunity(TimestampMixin, db.Model):
    """Opportunity posted by an organization or by an individual user."""

    __tablename__ = "opportunities"
    __table_args__ = (
        db.CheckConstraint(
            "(organization_id IS NULL) <> (user_id IS NULL)",
            name="ck_opportunity_single_owner",
        ),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.Enum(Category, name="category"), nullable=False)
    opportunity_type = db.Column(
        db.Enum(OpportunityType, name="opportunity_type"), nullable=False
    )
    experience_level = db.Column(
        db.Enum(ExperienceLevel, name="experience_level"), nullable=False
    )
    payment_type = db.Column(db.Enum(PaymentType, name="payment_type"), nullable=False)
    location = db.Column(db.String(200), nullable=False)
    # Reference returned by the storage service, not the file itself.
    image = db.Column(db.String(255), nullable=True)

    organization_id = db.Column(
        db.Integer,
        db.ForeignKey("organizations.id"),
        nullable=True,
        index=True,
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=True, index=True
    )

    # -- Relationships -----------------------------------------------------
    organization = db.relationship("Organization", back_populates="opportunities")
    user = db.relationship("User", back_populates="opportunities")

    @property
    def owner_kind(self) -> str:
        """``'organization'`` or ``'user'`` depending on the owning side."""
        return "organization" if self.organization_id is not None else "user"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "opportunityType": self.opportunity_type.value,
            "experienceLevel": self.experience_level.value,
            "paymentType": self.payment_type.value,
            "location": self.location,
            "image": self.image,
            "organizationId": self.organization_id,
            "userId": self.user_id,
            "ownerKind": self.owner_kind,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Opportunity {self.id}: {self.title} ({self.owner_kind})>"
