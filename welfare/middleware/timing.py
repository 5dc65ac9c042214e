"""
Request id and timing.

First hook in the chain. Assigns g.request_id (the caller's X-Request-ID,
or a fresh one), and after the response echoes it back together with
X-Request-Duration-Ms. One log line per request: DEBUG normally, WARNING
above SLOW_REQUEST_MS, ERROR for 5xx. Role and center are added to the
line by logging_config.RequestContextFilter.
"""

import logging
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 1000
UNLOGGED_PATHS = frozenset({"/api/health", "/api/health/live"})


def _request_id() -> str:
    supplied = (request.headers.get("X-Request-ID") or "").strip()
    return supplied[:64] if supplied else uuid.uuid4().hex[:12]


def init_request_timing(app: Flask):
    @app.before_request
    def _start_timer():
        g.request_id = _request_id()
        g.request_start = time.perf_counter()

    @app.after_request
    def _finish_timer(response):
        started = getattr(g, "request_start", None)
        if started is None:
            return response

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = g.request_id
        response.headers["X-Request-Duration-Ms"] = f"{elapsed_ms:.1f}"

        if request.path in UNLOGGED_PATHS:
            return response

        if response.status_code >= 500:
            level = logging.ERROR
        elif elapsed_ms > SLOW_REQUEST_MS:
            level = logging.WARNING
        else:
            level = logging.DEBUG
        logger.log(
            level, "%s %s -> %d (%.0fms)",
            request.method, request.path, response.status_code, elapsed_ms,
            extra={
                "method": request.method,
                "status": response.status_code,
                "duration_ms": elapsed_ms,
                "remote_addr": request.remote_addr,
            },
        )
        return response
