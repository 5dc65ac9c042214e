"""
Madressa Models — student relationships, applications and results.

Relationship        — the applicant's family member enrolled as a student
MadressaApplication — one school enrolment per student; owns the parent questionnaire
AcademicResult      — school grade reports (used for questionnaire reporting)
IslamicResult       — Madressa grade reports (fallback grade source)
"""

from datetime import datetime, timezone

from welfare.models import db
from welfare.models.base import CenterScopedModel


def _utcnow():
    return datetime.now(timezone.utc)


class Relationship(CenterScopedModel):
    __tablename__ = "relationships"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100))
    surname = db.Column(db.String(100))
    id_number = db.Column(db.String(20))
    created_at = db.Column(db.DateTime, default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "center_id": self.center_id,
            "name": self.name,
            "surname": self.surname,
            "id_number": self.id_number,
        }


class MadressaApplication(CenterScopedModel):
    __tablename__ = "madressah_application"

    id = db.Column(db.Integer, primary_key=True)
    applicant_relationship_id = db.Column(
        db.Integer, db.ForeignKey("relationships.id", ondelete="SET NULL"), nullable=True
    )
    status = db.Column(db.String(50), default="pending")
    notes = db.Column(db.Text)
    created_by = db.Column(db.String(100))
    updated_by = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    student = db.relationship("Relationship")

    def to_dict(self):
        student = self.student
        return {
            "id": self.id,
            "center_id": self.center_id,
            "applicant_relationship_id": self.applicant_relationship_id,
            "student_name": student.name if student else None,
            "student_surname": student.surname if student else None,
            "status": self.status,
            "notes": self.notes,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class AcademicResult(CenterScopedModel):
    __tablename__ = "academic_results"

    id = db.Column(db.Integer, primary_key=True)
    madressah_app_id = db.Column(
        db.Integer,
        db.ForeignKey("madressah_application.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    grade = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, default=_utcnow)


class IslamicResult(CenterScopedModel):
    __tablename__ = "islamic_results"

    id = db.Column(db.Integer, primary_key=True)
    madressah_app_id = db.Column(
        db.Integer,
        db.ForeignKey("madressah_application.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    grade = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, default=_utcnow)
