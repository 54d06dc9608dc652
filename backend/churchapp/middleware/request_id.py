"""
ChurchApp Backend — Request ID Middleware
===========================================

What:  Gives every request a correlation ID, stores it in a ContextVar and
       returns it in the X-Request-ID response header.
How:   The web and mobile apps send their own X-Request-ID; it is kept when it
       is a short token of letters, digits, '-' or '_'. Anything else (absent,
       too long, containing spaces or newlines) is replaced by a fresh
       8-character hex ID, so log lines cannot be forged through the header.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def accept_client_request_id(value: Optional[str]) -> Optional[str]:
    if value and _CLIENT_ID_PATTERN.match(value):
        return value
    return None


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accept_client_request_id(request.headers.get(REQUEST_ID_HEADER)) or new_request_id()
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
