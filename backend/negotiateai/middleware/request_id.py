"""
NegotiateAI Backend - Request ID Middleware
============================================

What:  Assigns a correlation id to each incoming request and echoes it in
       the X-Request-ID response header.
How:   Uses the client's X-Request-ID when present (the extension sends one
       per user action), otherwise a short random id. The id is stored in a
       ContextVar for loggers and exception handlers, and in the scope state
       (request.state.request_id) for get_request_context.
Who:   Outermost application middleware.

Plain ASGI middleware: routes must keep the server's own `receive` channel,
which Request.is_disconnected() reads.
"""

import uuid
from contextvars import ContextVar

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"
MAX_CLIENT_ID_LENGTH = 64


def resolve_request_id(client_rid: str) -> str:
    client_rid = client_rid.strip()
    if client_rid and len(client_rid) <= MAX_CLIENT_ID_LENGTH:
        return client_rid
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware:

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        rid = resolve_request_id(Headers(scope=scope).get(REQUEST_ID_HEADER, ""))
        request_id_var.set(rid)
        scope.setdefault("state", {})["request_id"] = rid

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = rid
            await send(message)

        await self.app(scope, receive, send_with_request_id)
