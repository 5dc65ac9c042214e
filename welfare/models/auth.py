"""
Auth Models — application users.

A user carries exactly one role (user_type 1..5, see
welfare.services.rbac_matrix.Role) and an optional assigned center.
The App Admin has no center; every other role is provisioned with one.
"""

from datetime import datetime, timezone

from welfare.models import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False)
    password_hash = db.Column(db.String(256))
    full_name = db.Column(db.String(200))
    user_type = db.Column(db.Integer, nullable=False)
    center_id = db.Column(
        db.Integer, db.ForeignKey("center_detail.id", ondelete="SET NULL"), nullable=True
    )
    is_active = db.Column(db.Boolean, default=True)
    last_login_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.Index("ix_users_center_id", "center_id"),
    )

    center = db.relationship("CenterDetail")

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "user_type": self.user_type,
            "center_id": self.center_id,
            "is_active": self.is_active,
            "last_login_at": self.last_login_at.isoformat() if self.last_login_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
