"""JSON error responses with machine-readable codes.

Every error body has the same shape:

    {"error": "<human readable>", "code": "ERR_...", "details": {...}?}

Blueprints use it for request-shape problems they catch themselves;
the app-level handlers in welfare/__init__.py use it for the
NotFoundError / ValidationError / ConflictError raised by services.

    return api_error(E.VALIDATION_REQUIRED, "Username and password are required")
"""

from __future__ import annotations

from flask import jsonify


class E:
    """Error codes returned in the ``code`` field."""

    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"
    AUTH_FAILED = "ERR_AUTH_FAILED"
    ACCOUNT_INACTIVE = "ERR_ACCOUNT_INACTIVE"
    NOT_FOUND = "ERR_NOT_FOUND"
    CONFLICT_DUPLICATE = "ERR_CONFLICT_DUPLICATE"
    RATE_LIMITED = "ERR_RATE_LIMITED"
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"


STATUS_BY_CODE: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.AUTH_FAILED: 401,
    E.ACCOUNT_INACTIVE: 403,
    E.NOT_FOUND: 404,
    E.CONFLICT_DUPLICATE: 409,
    E.RATE_LIMITED: 429,
    E.DATABASE: 500,
    E.INTERNAL: 500,
}

# Reverse lookup used when a service reports only an HTTP status.
_CODE_BY_STATUS = {
    400: E.VALIDATION_INVALID,
    401: E.AUTH_FAILED,
    403: E.ACCOUNT_INACTIVE,
    404: E.NOT_FOUND,
    409: E.CONFLICT_DUPLICATE,
}


def code_for_status(status: int) -> str:
    return _CODE_BY_STATUS.get(status, E.INTERNAL if status >= 500 else E.VALIDATION_INVALID)


def api_error(code: str, message: str, *, status: int | None = None, details: dict | None = None, **extra):
    """Build ``(response, status)`` for an error.

    ``status`` defaults to STATUS_BY_CODE[code] (400 for unknown codes).
    Keyword ``extra`` fields are merged into the body as-is.
    """
    body = {"error": message, "code": code, **extra}
    if details:
        body["details"] = details
    return jsonify(body), status or STATUS_BY_CODE.get(code, 400)
