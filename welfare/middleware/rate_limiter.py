"""
Rate limiting configuration.

Applies per-blueprint limits using Flask-Limiter. The Limiter instance is
created in welfare/__init__.py with no default limits; this module applies
the granular limits per route category.

Usage:
    from welfare.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

LOGIN_LIMIT = "10/minute"
WRITE_LIMIT = "60/minute"

WRITE_BLUEPRINTS = ("center_detail", "madressa_application", "parent_questionnaire")

_WRITE_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Login:            10/minute  (credential stuffing)
        - Write endpoints:  60/minute  (POST/PUT/PATCH/DELETE)
        - Health check:     exempt

    Rate limiting is disabled in testing mode.
    """
    if app.config.get("TESTING") or not app.config.get("RATELIMIT_ENABLED", True):
        logger.info("Rate limiter disabled")
        return

    login_view = app.view_functions.get("auth.login")
    if login_view is not None:
        app.view_functions["auth.login"] = limiter.limit(LOGIN_LIMIT)(login_view)

    for bp_name in WRITE_BLUEPRINTS:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(WRITE_LIMIT, methods=list(_WRITE_METHODS))(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    logger.info("Rate limiter configured — login: %s, write: %s", LOGIN_LIMIT, WRITE_LIMIT)
