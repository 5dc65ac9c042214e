"""
Tenant Scope — per-request tenant context and data-layer center filtering.

Rules:
  - Only the App Admin has global access (no center filter).
  - HQ and all center-scoped roles are filtered to their assigned center.
  - Unknown roles are treated as center-scoped with no global access.
  - A center-scoped context without a center matches NO rows, and so does
    a missing context. Absence of tenant information never widens access.

Usage:
    ctx = resolve_tenant_context(principal.user_type, principal.center_id)
    stmt = scope_query(select(MadressaApplication), MadressaApplication, ctx)
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import false, true

from welfare.services.rbac_matrix import Role, coerce_role, needs_center_restriction


@dataclass(frozen=True)
class Principal:
    """Authenticated user as seen by the request pipeline."""
    user_id: int | None
    username: str
    user_type: int | None
    center_id: int | None

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "user_type": self.user_type,
            "center_id": self.center_id,
        }


@dataclass(frozen=True)
class TenantContext:
    center_id: int | None
    is_global_access: bool
    is_hq: bool
    is_app_admin: bool
    role: Role | None = None

    @property
    def is_multi_center(self) -> bool:
        return self.is_global_access

    @property
    def is_super_admin(self) -> bool:
        return self.is_app_admin

    def to_dict(self) -> dict:
        return {
            "center_id": self.center_id,
            "is_multi_center": self.is_multi_center,
            "is_app_admin": self.is_app_admin,
            "is_super_admin": self.is_super_admin,
            "is_hq": self.is_hq,
        }


def normalise_center_id(value) -> int | None:
    """Normalize a center identifier to int; None for missing/non-numeric input."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def resolve_tenant_context(user_type, center_id) -> TenantContext:
    """Derive the tenant context from the principal's role and assigned center."""
    role = coerce_role(user_type)
    is_app_admin = role is Role.APP_ADMIN
    is_global_access = is_app_admin and not needs_center_restriction(role)
    return TenantContext(
        center_id=None if is_app_admin else normalise_center_id(center_id),
        is_global_access=is_global_access,
        is_hq=role is Role.HQ,
        is_app_admin=is_app_admin,
        role=role,
    )


def center_filter(model, context: TenantContext | None):
    """Return the WHERE clause restricting ``model`` rows to the context's center."""
    if context is None:
        return false()
    if context.is_global_access:
        return true()
    if context.center_id is None:
        return false()
    return model.center_id == context.center_id


def scope_query(stmt, model, context: TenantContext | None):
    """Apply the center filter to a select() statement."""
    return stmt.where(center_filter(model, context))


def can_access_center(context: TenantContext | None, center_id) -> bool:
    """Single-row equivalent of center_filter."""
    if context is None:
        return False
    if context.is_global_access:
        return True
    if context.center_id is None:
        return False
    return normalise_center_id(center_id) == context.center_id
