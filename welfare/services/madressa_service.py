"""
Madressa Application Service — tenant-scoped CRUD.

Every read goes through MadressaApplication.query_for_center(context), so a
record from another center is indistinguishable from a missing one (404).

Center assignment on create:
    center-scoped caller → the caller's own center (body center_id ignored)
    global caller        → body center_id, else the student's center
    unresolved           → ValidationError
"""

import logging

from sqlalchemy import select

from welfare.core.exceptions import NotFoundError, ValidationError
from welfare.models import db
from welfare.models.center import CenterDetail
from welfare.models.madressa import MadressaApplication, Relationship
from welfare.services.tenant_scope import normalise_center_id, scope_query

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("status", "notes")


def list_applications(context, relationship_id: int | None = None) -> list[MadressaApplication]:
    stmt = MadressaApplication.query_for_center(context)
    if relationship_id is not None:
        stmt = stmt.where(MadressaApplication.applicant_relationship_id == relationship_id)
    stmt = stmt.order_by(MadressaApplication.id.desc())
    return db.session.execute(stmt).scalars().all()


def get_application(context, app_id: int) -> MadressaApplication:
    stmt = MadressaApplication.query_for_center(context).where(MadressaApplication.id == app_id)
    application = db.session.execute(stmt).scalar_one_or_none()
    if application is None:
        raise NotFoundError(
            resource="MadressaApplication",
            resource_id=app_id,
            center_id=getattr(context, "center_id", None),
        )
    return application


def get_relationship(context, relationship_id: int) -> Relationship:
    stmt = scope_query(select(Relationship), Relationship, context).where(
        Relationship.id == relationship_id
    )
    relationship = db.session.execute(stmt).scalar_one_or_none()
    if relationship is None:
        raise NotFoundError(resource="Relationship", resource_id=relationship_id)
    return relationship


def _resolve_center(context, data: dict, relationship: Relationship | None) -> int:
    if context is not None and not context.is_global_access:
        if context.center_id is None:
            raise ValidationError("center_id is required to create application")
        return context.center_id

    center_id = normalise_center_id(data.get("center_id"))
    if center_id is None and relationship is not None:
        center_id = relationship.center_id
    if center_id is None:
        raise ValidationError(
            "center_id is required. Either provide it directly or ensure "
            "the relationship has a center_id."
        )
    if db.session.get(CenterDetail, center_id) is None:
        raise ValidationError(f"Center {center_id} does not exist")
    return center_id


def create_application(context, principal, data: dict) -> MadressaApplication:
    relationship = None
    rel_id = data.get("applicant_relationship_id")
    if rel_id is not None:
        relationship = get_relationship(context, rel_id)

    center_id = _resolve_center(context, data, relationship)
    username = principal.username if principal else None

    application = MadressaApplication(
        center_id=center_id,
        applicant_relationship_id=relationship.id if relationship else None,
        status=data.get("status") or "pending",
        notes=data.get("notes"),
        created_by=username,
        updated_by=username,
    )
    db.session.add(application)
    db.session.commit()
    logger.info("Madressa application %s created in center %s", application.id, center_id)
    return application


def update_application(context, principal, app_id: int, data: dict) -> MadressaApplication:
    application = get_application(context, app_id)
    for field in EDITABLE_FIELDS:
        if field in data:
            setattr(application, field, data[field])
    application.updated_by = principal.username if principal else None
    db.session.commit()
    return application


def delete_application(context, app_id: int) -> None:
    application = get_application(context, app_id)
    db.session.delete(application)
    db.session.commit()
    logger.info("Madressa application %s deleted", app_id)
