"""
Audit logging model.

``AuditLog`` records every data change made through the service layer.
"""

from wematch.extensions import db
from wematch.models.mixins import isoformat, utcnow


class AuditLog(db.Model):
    """
    Records all data changes in the application.

    Change details are stored as JSON text.

    ``action_type`` values: CREATE, UPDATE, DELETE, LOGIN.

    JSON conventions for ``previous_value`` / ``new_value``:
      - CREATE: previous_value is NULL, new_value has the full record.
      - UPDATE: both contain only the changed fields.
      - DELETE: previous_value has the full record, new_value is NULL.

    ``user_id`` is a plain integer, not a foreign key, so the trail
    survives deletion of the acting user.
    """

    __tablename__ = "audit_log"

    # BIGINT on real servers; SQLite only auto-increments INTEGER keys.
    id = db.Column(
        db.BigInteger().with_variant(db.Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    user_id = db.Column(db.Integer, nullable=True, index=True)
    action_type = db.Column(db.String(50), nullable=False)
    entity_type = db.Column(db.String(100), nullable=False)
    entity_id = db.Column(db.Integer, nullable=True)
    previous_value = db.Column(db.Text, nullable=True)
    new_value = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "actionType": self.action_type,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "previousValue": self.previous_value,
            "newValue": self.new_value,
            "ipAddress": self.ip_address,
            "createdAt": isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return (
            f"<AuditLog {self.action_type} {self.entity_type}"
            f":{self.entity_id}>"
        )
