from __future__ import annotations

from ..extensions import db
from storefront.time_utils import to_utc_z, utcnow


class SecurityEvent(db.Model):
    """
    Append-only log of login attempts.

    WHY: Failed logins are counted per identifier to lock out brute-force
    attempts (see login_throttle_service). Never updated or deleted by the
    request path.
    """
    __tablename__ = "security_events"
    __table_args__ = (
        db.Index("ix_security_events_type_action_occurred", "event_type", "action", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # No foreign key: events outlive users and may reference unknown emails
    user_id = db.Column(db.String(36), nullable=True, index=True)

    event_type = db.Column(db.String(64), nullable=False)  # LOGIN_FAILED, LOGIN_SUCCESS
    resource = db.Column(db.String(128), nullable=True)
    action = db.Column(db.String(255), nullable=True)  # identifier (email) the attempt was made for
    success = db.Column(db.Boolean, nullable=False)
    reason = db.Column(db.String(255), nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "event_type": self.event_type,
            "resource": self.resource,
            "action": self.action,
            "success": self.success,
            "reason": self.reason,
            "occurred_at": to_utc_z(self.occurred_at),
        }
