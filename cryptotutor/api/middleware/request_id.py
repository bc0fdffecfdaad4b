"""
Request ID middleware for log correlation.

Accepts a well-formed X-Request-ID from the client or generates one, exposes
it on request.state and the response, and sets the logging context var for
the duration of the request.
"""

import re
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from cryptotutor.logging_config import get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 1000

# Client-supplied ids end up in logs; keep them short and printable
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assign a request ID to each request and time it."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER) or ""
        request_id = incoming if _VALID_REQUEST_ID.match(incoming) else str(uuid.uuid4())

        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000

            response.headers[REQUEST_ID_HEADER] = request_id

            if duration_ms > SLOW_REQUEST_MS:
                logger.warning(
                    "Slow request",
                    extra={
                        "path": request.url.path,
                        "method": request.method,
                        "duration_ms": round(duration_ms, 1),
                    },
                )
            else:
                logger.debug(
                    "%s %s -> %d",
                    request.method,
                    request.url.path,
                    response.status_code,
                )

            return response
        finally:
            request_id_var.reset(token)
