import logging
import re
import time
from typing import Optional
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware

from placesapi.core.logging import request_id_ctx_var, latency_bucket_ms

# Client-supplied ids are echoed into headers and logs
_SAFE_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,128}")


def accept_request_id(value: Optional[str]) -> str:
    """Client request id when it is a safe token, otherwise a fresh uuid4."""
    if value and _SAFE_REQUEST_ID.fullmatch(value):
        return value
    return str(uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Correlate one request across the response header and every log line.

    The id is bound to the logging context for the duration of the call.
    Completion is logged once per request with the authenticated user
    (when a session was resolved) and a latency bucket; server errors
    log at WARNING.
    """

    def __init__(self, app, header_name: str = "x-request-id"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next):
        rid = accept_request_id(request.headers.get(self.header_name))
        request.state.request_id = rid
        token = request_id_ctx_var.set(rid)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_ctx_var.reset(token)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers[self.header_name] = rid
        status = response.status_code
        logging.getLogger("placesapi").log(
            logging.WARNING if status >= 500 else logging.INFO,
            "request.complete",
            extra={
                "request_id": rid,
                "user_id": getattr(request.state, "user_id", None),
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "error_code": getattr(request.state, "error_code", None),
                "latency_bucket": latency_bucket_ms(elapsed_ms),
            },
        )
        return response
