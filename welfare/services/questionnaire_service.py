"""
Parent Questionnaire Service — tenant-scoped persistence around the scoring engine.

Business context:
    Each Madressa application has at most one parent questionnaire.
    Submitting a questionnaire for an application that already has one
    updates it (upsert); the derived commitment fields are recomputed from
    the stored answers on every write and are never taken from the client.

Center resolution on save:
    center-scoped caller → the caller's own center
    global caller        → body center_id → existing questionnaire
                           → application → application's student relationship
    nothing resolved     → ValidationError("center_id is required to create questionnaire")

Security:
    - Every query goes through ParentQuestionnaire.query_for_center(context).
    - The target application must be visible in the caller's context (404 otherwise).
"""

import logging

from sqlalchemy import select

from welfare.core.exceptions import NotFoundError, ValidationError
from welfare.models import db
from welfare.models.center import CenterDetail
from welfare.models.madressa import AcademicResult, IslamicResult, MadressaApplication
from welfare.models.questionnaire import ANSWER_FIELDS, DERIVED_FIELDS, ParentQuestionnaire
from welfare.services import questionnaire_reports
from welfare.services.madressa_service import get_application
from welfare.services.questionnaire_scoring import decode_json_list, enrich_for_persistence
from welfare.services.tenant_scope import center_filter, normalise_center_id

logger = logging.getLogger(__name__)


# ── Serialisation ─────────────────────────────────────────────────────────────


def serialize(record: ParentQuestionnaire) -> dict:
    """Questionnaire dict plus the student's name, surname and id number."""
    data = record.to_dict()
    application = record.application
    student = application.student if application else None
    data["student_name"] = student.name if student else None
    data["student_surname"] = student.surname if student else None
    data["student_id_number"] = student.id_number if student else None
    return data


def _answers_from(data: dict) -> dict:
    return {field: data[field] for field in ANSWER_FIELDS if field in data}


def _apply_answers(record: ParentQuestionnaire, answers: dict) -> None:
    """Write ``answers`` over the stored ones and recompute derived fields."""
    merged = record.answers() if record.id is not None else {}
    merged.update(answers)
    enriched = enrich_for_persistence(merged)
    for field in ANSWER_FIELDS + DERIVED_FIELDS:
        setattr(record, field, enriched.get(field))


def _parse_app_id(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed or None


# ── Reads ─────────────────────────────────────────────────────────────────────


def list_questionnaires(context, madressah_app_id: int | None = None) -> list[ParentQuestionnaire]:
    stmt = ParentQuestionnaire.query_for_center(context)
    if madressah_app_id is not None:
        stmt = stmt.where(ParentQuestionnaire.madressah_app_id == madressah_app_id)
    stmt = stmt.order_by(ParentQuestionnaire.created_at.desc(), ParentQuestionnaire.id.desc())
    return db.session.execute(stmt).scalars().all()


def list_for_application(context, madressah_app_id: int) -> list[ParentQuestionnaire]:
    return list_questionnaires(context, madressah_app_id=madressah_app_id)


def get_questionnaire(context, questionnaire_id: int) -> ParentQuestionnaire:
    stmt = ParentQuestionnaire.query_for_center(context).where(
        ParentQuestionnaire.id == questionnaire_id
    )
    record = db.session.execute(stmt).scalar_one_or_none()
    if record is None:
        raise NotFoundError(
            resource="Parent questionnaire",
            resource_id=questionnaire_id,
            center_id=getattr(context, "center_id", None),
        )
    return record


def _existing_for_application(madressah_app_id: int) -> ParentQuestionnaire | None:
    stmt = (
        select(ParentQuestionnaire)
        .where(ParentQuestionnaire.madressah_app_id == madressah_app_id)
        .order_by(ParentQuestionnaire.id)
    )
    return db.session.execute(stmt).scalars().first()


# ── Writes ────────────────────────────────────────────────────────────────────


def _resolve_center(
    context,
    data: dict,
    existing: ParentQuestionnaire | None,
    application: MadressaApplication,
) -> int:
    if context is not None and not context.is_global_access:
        center_id = context.center_id
    else:
        candidates = [data.get("center_id")]
        if existing is not None:
            candidates.append(existing.center_id)
        candidates.append(application.center_id)
        if application.student is not None:
            candidates.append(application.student.center_id)

        center_id = None
        for candidate in candidates:
            center_id = normalise_center_id(candidate)
            if center_id is not None:
                break

    if center_id is None:
        raise ValidationError("center_id is required to create questionnaire")
    if db.session.get(CenterDetail, center_id) is None:
        raise ValidationError(f"Center {center_id} does not exist")
    return center_id


def save_questionnaire(context, principal, data: dict) -> tuple[ParentQuestionnaire, bool]:
    """Create the application's questionnaire, or update it if one exists.

    Returns:
        (record, created) — created is False when an existing questionnaire
        for the same application was updated.
    """
    madressah_app_id = _parse_app_id(data.get("madressah_app_id"))
    if madressah_app_id is None:
        raise ValidationError("madressah_app_id is required to create questionnaire")

    application = get_application(context, madressah_app_id)
    existing = _existing_for_application(madressah_app_id)
    center_id = _resolve_center(context, data, existing, application)
    username = principal.username if principal and principal.username else "system"

    if existing is not None:
        _apply_answers(existing, _answers_from(data))
        existing.center_id = center_id
        existing.updated_by = username
        db.session.commit()
        logger.info(
            "Parent questionnaire %s updated via upsert (app=%s, flag=%s)",
            existing.id, madressah_app_id, existing.flag_level,
        )
        return existing, False

    record = ParentQuestionnaire(
        madressah_app_id=madressah_app_id,
        center_id=center_id,
        created_by=username,
        updated_by=username,
    )
    _apply_answers(record, _answers_from(data))
    db.session.add(record)
    db.session.commit()
    logger.info(
        "Parent questionnaire %s created (app=%s, center=%s, flag=%s)",
        record.id, madressah_app_id, center_id, record.flag_level,
    )
    return record, True


def update_questionnaire(context, principal, questionnaire_id: int, data: dict) -> ParentQuestionnaire:
    record = get_questionnaire(context, questionnaire_id)
    _apply_answers(record, _answers_from(data))
    record.updated_by = principal.username if principal and principal.username else "system"
    db.session.commit()
    return record


def delete_questionnaire(context, questionnaire_id: int) -> None:
    record = get_questionnaire(context, questionnaire_id)
    db.session.delete(record)
    db.session.commit()
    logger.info("Parent questionnaire %s deleted", questionnaire_id)


# ── Reporting ─────────────────────────────────────────────────────────────────


def _latest_grades(model, app_ids: list[int]) -> dict[int, str]:
    """Latest non-blank grade per application from ``model``."""
    if not app_ids:
        return {}
    stmt = (
        select(model.madressah_app_id, model.grade)
        .where(model.madressah_app_id.in_(app_ids))
        .order_by(model.created_at.desc(), model.id.desc())
    )
    latest: dict[int, str | None] = {}
    for app_id, grade in db.session.execute(stmt).all():
        latest.setdefault(app_id, grade)
    return {k: v for k, v in latest.items() if v and v.strip()}


def report_rows(context) -> list[dict]:
    """Scoped questionnaire rows with center name and resolved grade."""
    stmt = (
        select(ParentQuestionnaire, CenterDetail.organisation_name)
        .join(CenterDetail, CenterDetail.id == ParentQuestionnaire.center_id)
        .where(center_filter(ParentQuestionnaire, context))
        .order_by(ParentQuestionnaire.id)
    )
    results = db.session.execute(stmt).all()

    app_ids = sorted({record.madressah_app_id for record, _ in results})
    academic = _latest_grades(AcademicResult, app_ids)
    islamic = _latest_grades(IslamicResult, app_ids)

    rows = []
    for record, center_name in results:
        rows.append({
            "center_id": record.center_id,
            "center_name": center_name,
            "grade": academic.get(record.madressah_app_id) or islamic.get(record.madressah_app_id),
            "commitment_score": record.commitment_score,
            "commitment_category": record.commitment_category,
            "flag_level": record.flag_level,
            "inconsistency_flags": decode_json_list(record.inconsistency_flags),
            "madressah_app_id": record.madressah_app_id,
        })
    return rows


def build_report(context) -> dict:
    return questionnaire_reports.build_report(report_rows(context))


def list_flagged(context) -> list[dict]:
    """Questionnaires needing follow-up: flag other than green, or any inconsistency."""
    stmt = (
        ParentQuestionnaire.query_for_center(context)
        .order_by(ParentQuestionnaire.updated_at.desc(), ParentQuestionnaire.id.desc())
    )
    records = [
        r for r in db.session.execute(stmt).scalars().all()
        if r.flag_level != "green" or decode_json_list(r.inconsistency_flags)
    ]

    academic = _latest_grades(AcademicResult, sorted({r.madressah_app_id for r in records}))
    center_names = {c.id: c.organisation_name for c in db.session.execute(select(CenterDetail)).scalars()}

    flagged = []
    for record in records:
        data = serialize(record)
        data["center_name"] = center_names.get(record.center_id)
        data["academic_grade"] = academic.get(record.madressah_app_id)
        flagged.append(data)
    return flagged
