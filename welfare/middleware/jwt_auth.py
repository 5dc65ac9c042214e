"""
JWT Auth Middleware — Parses the bearer token and sets g.current_user.

g.current_user is a Principal (user_id, username, user_type, center_id)
built from the token claims, or None when the request carries no valid
access token. This hook never rejects a request itself: route_guard
answers 401 for protected paths without a principal.

Chain order:
  timing.py  →  jwt_auth.py  →  tenant_context.py  →  route_guard.py
"""

import logging

import jwt as pyjwt
from flask import g, request

from welfare.services.jwt_service import decode_access_token
from welfare.services.tenant_scope import Principal

logger = logging.getLogger(__name__)

# Paths that skip JWT auth entirely
JWT_SKIP_PREFIXES = (
    "/api/auth/login",
    "/api/health",
)


def principal_from_claims(payload: dict) -> Principal:
    sub = payload.get("sub")
    return Principal(
        user_id=int(sub) if sub is not None and str(sub).isdigit() else None,
        username=payload.get("username") or "",
        user_type=payload.get("user_type"),
        center_id=payload.get("center_id"),
    )


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.current_user = None

        path = request.path
        if not path.startswith("/api/"):
            return
        for prefix in JWT_SKIP_PREFIXES:
            if path.startswith(prefix):
                return

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return

        token = auth_header[7:]  # Strip "Bearer "

        try:
            payload = decode_access_token(token)
        except pyjwt.ExpiredSignatureError:
            logger.info("Expired access token on %s %s", request.method, path)
            return
        except pyjwt.InvalidTokenError as exc:
            logger.warning("Invalid access token on %s %s: %s", request.method, path, exc)
            return

        g.current_user = principal_from_claims(payload)
