from __future__ import annotations

import uuid

from ..extensions import db
from storefront.time_utils import to_utc_z, utcnow


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(db.Model):
    """
    User accounts for authentication and attribution.

    Users are never hard-deleted: deactivation flips is_active, which blocks
    login, token refresh and every authenticated request.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        db.Index("ix_users_created_at", "created_at"),
    )

    # Opaque identifier, also the "sub" claim of issued tokens
    id = db.Column(db.String(36), primary_key=True, default=_new_user_id)

    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default="user")
    department = db.Column(db.String(100), nullable=True)
    position = db.Column(db.String(100), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "department": self.department,
            "position": self.position,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at) if self.updated_at else None,
        }
