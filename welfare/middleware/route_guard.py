"""
Route Guard — app-level RBAC enforcement for every /api request.

A single app.before_request hook resolves the matched route's metadata
(blueprint module + admitted roles), then asks
welfare.services.rbac_matrix.authorize for a decision. Denials are answered
with 403 before any view, and therefore any database query, runs.

Route metadata:
    BLUEPRINT_ACCESS     blueprint name → RouteAccess(module, roles)
    @roles_allowed(...)  per-view override of the blueprint's role list

``roles=None`` means the route only requires authentication (no role
middleware), e.g. reading centers or /api/auth/me.

Requests that match no route are still authorized against the path, so an
Org Executive posting to an unmapped module gets 403, not 404.

Responses:
    401 {"msg": "Not authenticated"}        no principal
    403 <AccessDecision body>                see rbac_matrix.authorize
"""

import logging
from dataclasses import dataclass

from flask import Flask, g, jsonify, request

from welfare.services.rbac_matrix import ALL_ROLES, authorize, coerce_role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteAccess:
    module: str | None
    roles: frozenset | None = ALL_ROLES


# ── Route metadata per blueprint ─────────────────────────────────────────────

BLUEPRINT_ACCESS = {
    "auth": RouteAccess(module=None, roles=None),
    "center_detail": RouteAccess(module="Center_Detail", roles=None),
    "madressa_application": RouteAccess(module="Madressa_Application"),
    "parent_questionnaire": RouteAccess(module="Parent_Questionnaire"),
    "lookup": RouteAccess(module="Lookup"),
}

# Unauthenticated paths
GUARD_SKIP_PREFIXES = (
    "/api/auth/login",
    "/api/health",
)

_ROLES_ATTR = "allowed_roles"


def roles_allowed(*roles):
    """Declare the roles a view admits, overriding its blueprint default.

    Usage:
        @bp.route("/reports", methods=["GET"])
        @roles_allowed(Role.APP_ADMIN, Role.HQ, Role.ORG_ADMIN)
        def reports():
            ...
    """
    admitted = frozenset(coerce_role(r) for r in roles)
    if None in admitted:
        raise ValueError(f"Unknown role in {roles!r}")

    def decorator(f):
        setattr(f, _ROLES_ATTR, admitted)
        return f
    return decorator


def _route_metadata(app: Flask) -> tuple[RouteAccess | None, frozenset | None, bool]:
    """Return (blueprint access, admitted roles, requires_rbac) for the current request."""
    access = BLUEPRINT_ACCESS.get(request.blueprint) if request.blueprint else None
    view = app.view_functions.get(request.endpoint) if request.endpoint else None

    view_roles = getattr(view, _ROLES_ATTR, None) if view is not None else None
    if view_roles is not None:
        return access, view_roles, True
    if access is not None:
        return access, access.roles, access.roles is not None
    # Unmatched route or unmapped blueprint: classify by path, no role list.
    return None, None, True


def init_route_guard(app: Flask):
    """Register the authorization hook. Call after jwt_auth and tenant_context."""

    @app.before_request
    def _route_guard():
        g.access_decision = None

        if request.method == "OPTIONS":
            return None

        path = request.path
        if not path.startswith("/api/"):
            return None
        for prefix in GUARD_SKIP_PREFIXES:
            if path.startswith(prefix):
                return None

        principal = getattr(g, "current_user", None)
        if principal is None:
            return jsonify({"msg": "Not authenticated"}), 401

        access, allowed_roles, requires_rbac = _route_metadata(app)
        if not requires_rbac:
            return None

        decision = authorize(
            principal.user_type,
            request.method,
            path,
            allowed_roles=allowed_roles,
            module=access.module if access else None,
        )
        g.access_decision = decision

        if not decision.allowed:
            logger.warning(
                "Access denied: user=%s role=%s %s %s reason=%s",
                principal.username, principal.user_type,
                request.method, path, decision.reason,
            )
            return jsonify(decision.to_response()), 403

        return None

    logger.info(
        "Route guard installed for blueprints: %s",
        ", ".join(sorted(BLUEPRINT_ACCESS)),
    )
