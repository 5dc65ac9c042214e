"""
Center Service — CRUD for center_detail (the tenant unit).

Centers are readable by every authenticated user (they feed dropdowns);
writes are restricted to the App Admin at the route layer.
"""

import logging

from sqlalchemy import select

from welfare.core.exceptions import ConflictError, NotFoundError, ValidationError
from welfare.models import db
from welfare.models.center import CenterDetail

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("organisation_name", "contact_number", "email_address", "address")


def list_centers() -> list[CenterDetail]:
    stmt = select(CenterDetail).order_by(CenterDetail.organisation_name)
    return db.session.execute(stmt).scalars().all()


def get_center(center_id: int) -> CenterDetail:
    center = db.session.get(CenterDetail, center_id)
    if center is None:
        raise NotFoundError(resource="CenterDetail", resource_id=center_id)
    return center


def _assert_unique_name(name: str, exclude_id: int | None = None) -> None:
    stmt = select(CenterDetail.id).where(CenterDetail.organisation_name == name)
    if exclude_id is not None:
        stmt = stmt.where(CenterDetail.id != exclude_id)
    if db.session.execute(stmt).first() is not None:
        raise ConflictError("CenterDetail", "organisation_name", name)


def create_center(data: dict, username: str | None = None) -> CenterDetail:
    name = (data.get("organisation_name") or "").strip()
    if not name:
        raise ValidationError("organisation_name is required")
    _assert_unique_name(name)

    center = CenterDetail(
        organisation_name=name,
        contact_number=data.get("contact_number"),
        email_address=data.get("email_address"),
        address=data.get("address"),
        created_by=username,
        updated_by=username,
    )
    db.session.add(center)
    db.session.commit()
    logger.info("Center %s created by %s", center.id, username)
    return center


def update_center(center_id: int, data: dict, username: str | None = None) -> CenterDetail:
    center = get_center(center_id)
    if "organisation_name" in data:
        name = (data.get("organisation_name") or "").strip()
        if not name:
            raise ValidationError("organisation_name cannot be empty")
        _assert_unique_name(name, exclude_id=center_id)
        data = {**data, "organisation_name": name}

    for field in EDITABLE_FIELDS:
        if field in data:
            setattr(center, field, data[field])
    center.updated_by = username
    db.session.commit()
    return center


def delete_center(center_id: int) -> None:
    center = get_center(center_id)
    db.session.delete(center)
    db.session.commit()
    logger.info("Center %s deleted", center_id)
