"""
Welfare Platform API
Blueprint registry and shared request helpers.
"""

from flask import g, request


def current_principal():
    """The authenticated Principal set by jwt_auth, or None."""
    return getattr(g, "current_user", None)


def current_context():
    """The TenantContext set by tenant_context, or None (matches no rows)."""
    return getattr(g, "tenant_context", None)


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
