"""
Lookup Service — read access to shared reference values.

Lookup values are global reference data (no center filter). Only the
tables listed in LOOKUP_TABLES can be read; anything else is rejected so
the table name taken from the URL never reaches an arbitrary query.
"""

import logging

from sqlalchemy import select

from welfare.core.exceptions import NotFoundError, ValidationError
from welfare.models import db
from welfare.models.lookup import LookupValue

logger = logging.getLogger(__name__)

LOOKUP_TABLES: frozenset[str] = frozenset({
    "Supplier_Category",
    "Suburb",
    "Nationality",
    "Health_Conditions",
    "Skills",
    "Relationship_Types",
    "Tasks_Status",
    "Assistance_Types",
    "File_Status",
    "File_Condition",
    "Dwelling_Status",
    "Race",
    "Dwelling_Type",
    "Marital_Status",
    "Education_Level",
    "Employment_Status",
    "Gender",
    "Training_Outcome",
    "Training_Level",
    "Blood_Type",
    "Rating",
    "User_Types",
    "Policy_Procedure_Type",
    "Policy_Procedure_Field",
    "Income_Type",
    "Expense_Type",
    "Hampers",
    "Born_Religion",
    "Period_As_Muslim",
    "Training_Courses",
    "Means_of_communication",
    "Departments",
    "Terms",
    "Academic_Subjects",
    "Islamic_Subjects",
    "Maintenance_Type",
    "Home_Visit_Type",
})


def _require_table(table: str) -> None:
    if table not in LOOKUP_TABLES:
        logger.warning("Rejected lookup table %r", table)
        raise ValidationError("Invalid lookup table")


def list_values(table: str) -> list[LookupValue]:
    _require_table(table)
    stmt = (
        select(LookupValue)
        .where(LookupValue.table_name == table)
        .order_by(LookupValue.sort_order, LookupValue.name)
    )
    return db.session.execute(stmt).scalars().all()


def get_value(table: str, value_id: int) -> LookupValue:
    _require_table(table)
    stmt = select(LookupValue).where(
        LookupValue.table_name == table,
        LookupValue.id == value_id,
    )
    value = db.session.execute(stmt).scalar_one_or_none()
    if value is None:
        raise NotFoundError(resource=table, resource_id=value_id)
    return value


def seed_values(table: str, names: list[str]) -> int:
    """Insert missing values for ``table``; returns the number added."""
    _require_table(table)
    existing = {v.name for v in list_values(table)}
    added = 0
    for order, name in enumerate(names):
        if name in existing:
            continue
        db.session.add(LookupValue(table_name=table, name=name, sort_order=order))
        added += 1
    db.session.commit()
    return added
