"""Request id middleware.

Each request is tagged with the client's X-Request-ID (or X-Correlation-ID)
or a fresh uuid4. The id is held in a ContextVar for the duration of the
handler so log records and the upstream fetch can carry it, and it is
returned to the client in the X-Request-ID response header.
"""

import uuid
from collections.abc import Awaitable, Callable
from contextvars import ContextVar

from aiohttp import web

REQUEST_ID_HEADER = "X-Request-ID"
INCOMING_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
NO_REQUEST_ID = "no-request-id"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def _incoming_request_id(request: web.Request) -> str:
    for header in INCOMING_ID_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return str(uuid.uuid4())


@web.middleware
async def correlation_id_middleware(
    request: web.Request, handler: Callable[[web.Request], Awaitable[web.StreamResponse]]
) -> web.StreamResponse:
    """Bind a request id to the handler's context and echo it in the response."""
    request_id = _incoming_request_id(request)
    request["correlation_id"] = request_id

    token = request_id_var.set(request_id)
    try:
        response = await handler(request)
    finally:
        request_id_var.reset(token)

    response.headers[REQUEST_ID_HEADER] = request_id
    return response


def get_request_id() -> str:
    """Return the id of the request being handled, or NO_REQUEST_ID outside one."""
    return request_id_var.get() or NO_REQUEST_ID
