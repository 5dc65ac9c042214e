"""
Lookup values — shared reference data (Gender, Race, Suburb, ...).

Lookup tables are global: they are not center scoped and every
authenticated role may read them.
"""

from welfare.models import db


class LookupValue(db.Model):
    __tablename__ = "lookup_values"

    id = db.Column(db.Integer, primary_key=True)
    table_name = db.Column(db.String(100), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    sort_order = db.Column(db.Integer, default=0)

    __table_args__ = (
        db.UniqueConstraint("table_name", "name", name="uq_lookup_table_name"),
        db.Index("ix_lookup_values_table_name", "table_name"),
    )

    def to_dict(self):
        return {"id": self.id, "name": self.name}
