"""
NegotiateAI Backend - Explicit Request Context
===============================================

What:  A small immutable struct describing the request a pipeline runs for,
       and the FastAPI dependency that builds it.
How:   Routes receive a RequestContext via Depends(get_request_context) and
       pass it down explicitly. Pipelines and services never reach for the
       framework's request object or for the caller's identity on their own.
Who:   Built once per authenticated request; read by pipelines (logging,
       cancellation) and services (ownership, persistence).

Cancellation:
    RequestContext.bind() runs an outbound awaitable while polling the
    client connection. If the client goes away first, the outbound task is
    cancelled and ClientDisconnectedError is raised, so no result is
    persisted for a request nobody is waiting for.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from fastapi import Depends, Request

from negotiateai.exceptions import ClientDisconnectedError
from negotiateai.middleware.request_id import request_id_var
from negotiateai.models.user import User
from negotiateai.security import get_current_user

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Seconds between client-connection checks while a gateway call is pending
DISCONNECT_POLL_SECONDS = 0.5


@dataclass(frozen=True)
class RequestContext:
    """
    Attributes:
        request_id:       Correlation id (X-Request-ID) used in log lines
        user_id:          Authenticated caller; None for internal use
        is_disconnected:  Coroutine function reporting whether the client
                          has gone away; None disables cancellation
    """

    request_id: str = ""
    user_id: Optional[uuid.UUID] = None
    is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None

    async def bind(self, awaitable: Awaitable[T]) -> T:
        """
        Await `awaitable`, cancelling it if the client disconnects first.

        Raises:
            ClientDisconnectedError: The client closed the connection.
        """
        if self.is_disconnected is None:
            return await awaitable

        task = asyncio.ensure_future(awaitable)
        try:
            while True:
                done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
                if done:
                    return task.result()
                if await self.is_disconnected():
                    logger.info("[%s] Client disconnected, cancelling gateway call", self.request_id)
                    raise ClientDisconnectedError(context={"request_id": self.request_id})
        finally:
            if not task.done():
                task.cancel()


async def get_request_context(
    request: Request,
    user: User = Depends(get_current_user),
) -> RequestContext:
    """FastAPI dependency: context for an authenticated request."""
    rid = getattr(request.state, "request_id", None) or request_id_var.get("")
    return RequestContext(
        request_id=rid,
        user_id=user.id,
        is_disconnected=request.is_disconnected,
    )
