"""
Tenant Context Middleware — resolves the caller's center scope.

For every authenticated /api request this sets:
    g.tenant_context   TenantContext (or None if resolution failed)
    g.center_id        int | None
    g.is_multi_center  bool
    g.is_app_admin     bool
    g.is_super_admin   bool
    g.is_hq            bool

Services receive g.tenant_context explicitly and apply it with
welfare.services.tenant_scope.scope_query. A None context matches no rows.

Chain order:
  jwt_auth.py  →  tenant_context.py  →  route_guard.py  →  route handler
"""

import logging

from flask import g, request

from welfare.services.tenant_scope import resolve_tenant_context

logger = logging.getLogger(__name__)


def _reset_request_scope():
    g.tenant_context = None
    g.center_id = None
    g.is_multi_center = False
    g.is_app_admin = False
    g.is_super_admin = False
    g.is_hq = False


def init_tenant_context(app):
    """Register tenant context middleware as a before_request hook."""

    @app.before_request
    def _tenant_context():
        _reset_request_scope()

        if not request.path.startswith("/api/"):
            return None

        principal = getattr(g, "current_user", None)
        if principal is None:
            return None

        try:
            context = resolve_tenant_context(principal.user_type, principal.center_id)
        except Exception:
            logger.exception(
                "Tenant context resolution failed for user %s", principal.username
            )
            return None

        g.tenant_context = context
        g.center_id = context.center_id
        g.is_multi_center = context.is_multi_center
        g.is_app_admin = context.is_app_admin
        g.is_super_admin = context.is_super_admin
        g.is_hq = context.is_hq
        return None

    logger.info("Tenant context middleware installed")
