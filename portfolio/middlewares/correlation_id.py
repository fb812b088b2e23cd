"""
Correlation ids for HTTP requests.

Each request gets an id, taken from the ``X-Correlation-ID`` header when
the client sends a usable one, otherwise generated. The id is echoed in the
response header and included in every log line written while the request
is served.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

HEADER_NAME = "X-Correlation-ID"

# Client supplied ids are echoed into logs and headers, so keep them tame
_VALID_ID = re.compile(r"^[A-Za-z0-9_-]{1,36}$")

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:8]


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Bind a correlation id to the request for its whole lifetime.

    The id is also available as ``request.state.request_id``.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        incoming = request.headers.get(HEADER_NAME, "")
        cid = incoming if _VALID_ID.match(incoming) else new_correlation_id()

        request.state.request_id = cid
        token = correlation_id.set(cid)
        try:
            response = await call_next(request)
        finally:
            correlation_id.reset(token)

        response.headers[HEADER_NAME] = cid
        return response


def get_correlation_id() -> str:
    """Correlation id of the current request, or "" outside of one."""
    return correlation_id.get()
