"""
Skill model — a named skill listed on a user's profile.
"""

from wematch.extensions import db
from wematch.models.mixins import TimestampMixin, isoformat


class Skill(TimestampMixin, db.Model):
    """
    Skill owned by exactly one user.

    A user cannot list the same skill name twice.
    """

    __tablename__ = "skills"
    __table_args__ = (
        db.UniqueConstraint("user_id", "skill_name", name="uq_skill_user_name"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    skill_name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )

    # -- Relationships -----------------------------------------------------
    user = db.relationship("User", back_populates="skills")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "skillName": self.skill_name,
            "description": self.description,
            "userId": self.user_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Skill {self.skill_name} user={self.user_id}>"
