"""
CenterScopedModel — Abstract base class for center-scoped (tenant) models.

Every table that holds center-owned data inherits from CenterScopedModel
instead of db.Model directly. This adds:
  - center_id FK column with index
  - query_for_center(context) classmethod that applies the tenant filter
"""

from sqlalchemy import select

from welfare.models import db


class CenterScopedModel(db.Model):
    """Abstract base for center-scoped tables."""
    __abstract__ = True

    center_id = db.Column(
        db.Integer,
        db.ForeignKey("center_detail.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    @classmethod
    def query_for_center(cls, context):
        """Return a select() statement filtered by the request's tenant context.

        A missing context, or a center-scoped context without a center,
        yields a statement that matches no rows.
        """
        from welfare.services.tenant_scope import center_filter

        return select(cls).where(center_filter(cls, context))
