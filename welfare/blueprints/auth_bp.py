"""
Auth Blueprint — JWT authentication endpoints.

  POST /api/auth/login   — username + password → access token
  GET  /api/auth/me      — current principal and resolved tenant scope
"""

from flask import Blueprint, g, jsonify

from welfare.blueprints import current_context, current_principal, json_body
from welfare.services.jwt_service import token_response
from welfare.services.rbac_matrix import coerce_role, role_label
from welfare.services.user_service import (
    UserServiceError,
    authenticate_user,
    get_user_by_id,
)
from welfare.utils.errors import E, api_error, code_for_status

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


# ═══════════════════════════════════════════════════════════════
# POST /api/auth/login
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Authenticate with username + password, return an access token.

    Body: { "username": "...", "password": "..." }
    """
    data = json_body()
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""

    if not username or not password:
        return api_error(E.VALIDATION_REQUIRED, "Username and password are required")

    try:
        user = authenticate_user(username, password)
    except UserServiceError as e:
        return api_error(code_for_status(e.status_code), e.message, status=e.status_code)

    return jsonify(token_response(user)), 200


# ═══════════════════════════════════════════════════════════════
# GET /api/auth/me
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/me", methods=["GET"])
def me():
    """Current user profile plus the tenant scope applied to this request."""
    principal = current_principal()
    user = get_user_by_id(principal.user_id)
    if not user:
        return api_error(E.NOT_FOUND, "User not found")

    context = current_context()
    return jsonify({
        "user": user.to_dict(),
        "role_name": role_label(coerce_role(principal.user_type)),
        "tenant": context.to_dict() if context else None,
        "request_id": getattr(g, "request_id", None),
    }), 200
