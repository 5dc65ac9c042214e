"""
Parent Questionnaire model.

One questionnaire per Madressa application. Raw answers are stored as
submitted; commitment_score, commitment_category, flag_level and
inconsistency_flags are derived server-side on every create/update
(see welfare.services.questionnaire_scoring) and never accepted from clients.
"""

from datetime import datetime, timezone

from welfare.models import db
from welfare.models.base import CenterScopedModel
from welfare.services.questionnaire_scoring import decode_json_list

# Free-text / single-choice answer columns, in questionnaire order.
TEXT_ANSWER_FIELDS = (
    "prior_duration",
    "future_engagement",
    "attendance_frequency",
    "attendance_frequency_other",
    "commitment_level",
    "policy_support",
    "communication_channel",
    "communication_channel_other",
    "engagement_level",
    "contribution_type",
    "contribution_other",
    "medical_consent",
    "media_consent",
    "policy_compliance",
    "monthly_contribution",
    "monthly_contribution_other",
    "halal_preference",
    "worship_attendance",
    "fasting_support",
    "name_change_support",
    "burial_consent",
    "parent_interest",
    "expectations_other",
)

ANSWER_FIELDS = TEXT_ANSWER_FIELDS + ("expectations",)

DERIVED_FIELDS = (
    "commitment_score",
    "commitment_category",
    "flag_level",
    "inconsistency_flags",
)


def _utcnow():
    return datetime.now(timezone.utc)


class ParentQuestionnaire(CenterScopedModel):
    __tablename__ = "parent_questionnaire"

    id = db.Column(db.Integer, primary_key=True)
    madressah_app_id = db.Column(
        db.Integer,
        db.ForeignKey("madressah_application.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ── Raw answers ──────────────────────────────────────────────────────
    prior_duration = db.Column(db.String(255))
    future_engagement = db.Column(db.String(255))
    attendance_frequency = db.Column(db.String(255))
    attendance_frequency_other = db.Column(db.Text)
    commitment_level = db.Column(db.String(255))
    policy_support = db.Column(db.String(255))
    communication_channel = db.Column(db.String(255))
    communication_channel_other = db.Column(db.Text)
    engagement_level = db.Column(db.String(255))
    contribution_type = db.Column(db.String(255))
    contribution_other = db.Column(db.Text)
    medical_consent = db.Column(db.String(255))
    media_consent = db.Column(db.String(255))
    policy_compliance = db.Column(db.String(255))
    monthly_contribution = db.Column(db.String(255))
    monthly_contribution_other = db.Column(db.Text)
    halal_preference = db.Column(db.String(255))
    worship_attendance = db.Column(db.String(255))
    fasting_support = db.Column(db.String(255))
    name_change_support = db.Column(db.String(255))
    burial_consent = db.Column(db.String(255))
    parent_interest = db.Column(db.String(255))
    expectations = db.Column(db.JSON, default=list)
    expectations_other = db.Column(db.Text)

    # ── Derived (server-computed) ────────────────────────────────────────
    commitment_score = db.Column(db.Integer, default=0, nullable=False)
    commitment_category = db.Column(db.String(20), default="low", nullable=False)
    flag_level = db.Column(db.String(20), default="red", nullable=False, index=True)
    inconsistency_flags = db.Column(db.JSON, default=list)

    created_by = db.Column(db.String(100))
    updated_by = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    application = db.relationship("MadressaApplication")

    def answers(self) -> dict:
        """Return the raw answers as a plain dict (input to the scoring engine)."""
        data = {field: getattr(self, field) for field in TEXT_ANSWER_FIELDS}
        data["expectations"] = decode_json_list(self.expectations)
        return data

    def to_dict(self):
        d = {
            "id": self.id,
            "madressah_app_id": self.madressah_app_id,
            "center_id": self.center_id,
        }
        d.update(self.answers())
        d.update({
            "commitment_score": self.commitment_score,
            "commitment_category": self.commitment_category,
            "flag_level": self.flag_level,
            "inconsistency_flags": decode_json_list(self.inconsistency_flags),
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        })
        return d
