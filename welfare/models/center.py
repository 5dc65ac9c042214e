"""
Center model — the tenant unit.

Every center-scoped table references center_detail.id. Centers themselves
are shared reference data: any authenticated user may read them, only the
App Admin may create, edit or delete them.
"""

from datetime import datetime, timezone

from welfare.models import db


class CenterDetail(db.Model):
    __tablename__ = "center_detail"

    id = db.Column(db.Integer, primary_key=True)
    organisation_name = db.Column(db.String(200), nullable=False)
    contact_number = db.Column(db.String(50))
    email_address = db.Column(db.String(200))
    address = db.Column(db.Text)
    created_by = db.Column(db.String(100))
    updated_by = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "organisation_name": self.organisation_name,
            "contact_number": self.contact_number,
            "email_address": self.email_address,
            "address": self.address,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
