"""Request context middleware.

Assigns every request an id, makes it available to log records through
``request_id_var``, logs the inbound request with sensitive headers
redacted, and echoes the id back as ``X-Request-ID``.
"""

import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response

from app.logging_config import get_logger, log_request_event, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def request_context_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Run a request with its id bound to the logging context.

    An incoming ``X-Request-ID`` header is reused; otherwise a new UUID
    is generated.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    token = request_id_var.set(request_id)
    try:
        log_request_event(
            logger,
            method=request.method,
            path=request.url.path,
            query_params=request.query_params,
            headers=request.headers,
        )
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        request_id_var.reset(token)
