"""
NegotiateAI Backend - Request Logging Middleware
=================================================

What:  One access-log line per HTTP request: method, path, status, duration,
       request id and client address.
How:   Log level follows the status class (5xx ERROR, 4xx WARNING, else INFO).
       Health checks are skipped. The status is read from the
       http.response.start message; a request that fails before a response
       starts is logged as 500.

Privacy:
    Request bodies (negotiation drafts, passwords) and Authorization
    headers are never logged.
"""

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from negotiateai.middleware.request_id import request_id_var

logger = logging.getLogger("negotiateai.access")

HEALTH_PATH = "/api/health"


class RequestLoggingMiddleware:
    """
    Typical durations:
        - GET /api/health: 1-5ms
        - GET /api/analysis: 10-50ms (database query)
        - POST /api/analysis: 3000-15000ms (model call dominates)
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] == HEALTH_PATH:
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        client = scope.get("client")
        client_ip = client[0] if client else "unknown"
        method = scope["method"]
        path = scope["path"]
        rid = request_id_var.get("")
        status = 500

        async def send_with_status(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            if status >= 500:
                log_level = logging.ERROR
            elif status >= 400:
                log_level = logging.WARNING
            else:
                log_level = logging.INFO

            logger.log(
                log_level,
                "%s %s %d %.1fms [%s] from %s",
                method,
                path,
                status,
                duration_ms,
                rid,
                client_ip,
                extra={
                    "request_id": rid,
                    "method": method,
                    "path": path,
                    "status": status,
                    "duration_ms": round(duration_ms, 2),
                    "client_ip": client_ip,
                },
            )
