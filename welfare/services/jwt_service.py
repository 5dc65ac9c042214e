"""
JWT Service — signs and verifies the access tokens carried by every /api call.

The token is the only place the request pipeline learns who the caller is:
jwt_auth turns its claims into a Principal, tenant_context derives the
center scope from ``user_type`` + ``center_id``, and route_guard authorizes
on ``user_type``.

Claims:
    sub         str(user id)
    username
    user_type   1..5 (welfare.services.rbac_matrix.Role)
    center_id   assigned center, null for the App Admin
    type        always "access"
    iat / exp   issued-at / expiry (JWT_ACCESS_EXPIRES seconds, default 900)
    jti         random id, lets log lines tell two tokens of one user apart
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

ALGORITHM = "HS256"
TOKEN_TYPE = "access"
REQUIRED_CLAIMS = ("sub", "exp", "user_type")


def _signing_key() -> str:
    return current_app.config.get("JWT_SECRET_KEY") or current_app.config["SECRET_KEY"]


def access_lifetime() -> int:
    """Access token lifetime in seconds."""
    return int(current_app.config.get("JWT_ACCESS_EXPIRES", 900))


def generate_access_token(user_id: int, username: str, user_type: int, center_id: int | None) -> str:
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "username": username,
        "user_type": int(user_type),
        "center_id": center_id,
        "type": TOKEN_TYPE,
        "iat": issued,
        "exp": issued + timedelta(seconds=access_lifetime()),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(claims, _signing_key(), algorithm=ALGORITHM)


def token_response(user) -> dict:
    """Login response body for ``user``."""
    token = generate_access_token(user.id, user.username, user.user_type, user.center_id)
    return {
        "access_token": token,
        "token_type": "Bearer",
        "expires_in": access_lifetime(),
        "user": user.to_dict(),
    }


def decode_access_token(token: str) -> dict:
    """Verify signature, expiry and token type; return the claims.

    Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError.
    """
    claims = jwt.decode(
        token,
        _signing_key(),
        algorithms=[ALGORITHM],
        options={"require": list(REQUIRED_CLAIMS)},
    )
    if claims.get("type") != TOKEN_TYPE:
        raise jwt.InvalidTokenError(f"Expected access token, got {claims.get('type')!r}")
    return claims
