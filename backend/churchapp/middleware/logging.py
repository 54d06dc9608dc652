"""
ChurchApp Backend — Access Log Middleware
===========================================

What:  Writes one access line per request to the "churchapp.access" logger.

Line format:
    POST /finances 403 12.4ms rid=a1b2c3d4 principal=<user id|admin id|-> ip=10.0.0.7

Level by outcome:
    5xx        ERROR
    401 / 403  WARNING   (denied logins, role and permission gates)
    other 4xx  INFO      (validation, not found, conflicts)
    2xx / 3xx  INFO
    file serving under /uploads/ and health probes go to DEBUG

The principal is whatever the auth dependencies stored on request.state
while the route ran. Bodies, Authorization headers and file contents are
never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from churchapp.middleware.request_id import request_id_var

logger = logging.getLogger("churchapp.access")

DEBUG_PATH_PREFIXES = ("/health", "/uploads/")


def access_log_level(path: str, status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status in (401, 403):
        return logging.WARNING
    if path.startswith(DEBUG_PATH_PREFIXES):
        return logging.DEBUG
    return logging.INFO


def _principal(request: Request) -> str:
    admin = getattr(request.state, "admin_user", None)
    if admin is not None:
        return f"admin:{admin.id}"
    return getattr(request.state, "principal_id", None) or "-"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        path = request.url.path
        level = access_log_level(path, response.status_code)
        if logger.isEnabledFor(level):
            logger.log(
                level,
                "%s %s %d %.1fms rid=%s principal=%s ip=%s",
                request.method,
                path,
                response.status_code,
                elapsed_ms,
                request_id_var.get("") or "-",
                _principal(request),
                request.client.host if request.client else "-",
            )
        return response
