# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Error handling middleware for ASGI applications.

Catches exceptions raised during request processing and converts them
to HTTP responses. This is where the "not found" raised by the innermost
app finally becomes a 404.

Exception handling:
    - HTTPException: Returns status code with detail message
    - PathDecodeError: 400 Bad Request
    - PermissionError: 403 Forbidden
    - FileNotFoundError: 404 Not Found
    - Exception: Returns 500 Internal Server Error (logged)

If the response has already started when the exception arrives, nothing
can be sent any more and the exception is re-raised to the server.

Config:
    debug (bool): If True, include traceback in 500 responses. Default: False.
"""

from __future__ import annotations

import logging
import traceback
from typing import TYPE_CHECKING, Any

from . import BaseMiddleware
from ..exceptions import HTTPException

if TYPE_CHECKING:
    from ..types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("asgi_static")


class ErrorMiddleware(BaseMiddleware):
    """Error handling middleware for HTTP requests.

    Attributes:
        debug: If True, include stack traces in 500 error responses.

    Class Attributes:
        middleware_name: "errors" - identifier for config.
        middleware_order: 100 - runs early to catch all errors.
        middleware_default: True - enabled by default.
    """

    middleware_name = "errors"
    middleware_order = 100
    middleware_default = True

    # Exception type name to HTTP status
    ERROR_MAP: dict[str, tuple[int, str]] = {
        "PathDecodeError": (400, "Bad request"),
        "PermissionError": (403, "Forbidden"),
        "FileNotFoundError": (404, "Not found"),
    }

    __slots__ = ("debug",)

    def __init__(
        self,
        app: ASGIApp,
        debug: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        self.debug = debug

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process request with error handling.

        Non-HTTP requests (WebSocket, lifespan) pass through without error
        handling.
        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def send_tracking(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, receive, send_tracking)
        except Exception as e:
            if started:
                raise
            if isinstance(e, HTTPException):
                await self._send_error(send, e.status_code, e.detail, e.headers)
                return
            mapped = self._lookup(e)
            if mapped is not None:
                logger.info("%s %s: %s", scope.get("method", "?"), scope.get("path", "/"), e)
                await self._send_error(send, *mapped)
                return
            logger.exception("Unhandled error on %s", scope.get("path", "/"))
            await self._send_server_error(send)

    def _lookup(self, error: Exception) -> tuple[int, str] | None:
        for cls in type(error).__mro__:
            if cls.__name__ in self.ERROR_MAP:
                return self.ERROR_MAP[cls.__name__]
        return None

    async def _send_error(
        self,
        send: Send,
        status_code: int,
        detail: str,
        extra_headers: list[tuple[str, str]] | None = None,
    ) -> None:
        """Send a text/plain error response."""
        body_bytes = (detail or "").encode("utf-8")

        headers: list[tuple[bytes, bytes]] = [
            (b"content-type", b"text/plain; charset=utf-8"),
            (b"content-length", str(len(body_bytes)).encode()),
        ]
        if extra_headers:
            headers.extend((k.lower().encode(), v.encode()) for k, v in extra_headers)

        await send({"type": "http.response.start", "status": status_code, "headers": headers})
        await send({"type": "http.response.body", "body": body_bytes})

    async def _send_server_error(self, send: Send) -> None:
        """Send 500 Internal Server Error, with traceback when debugging."""
        if self.debug:
            body = f"Internal Server Error\n\n{traceback.format_exc()}"
        else:
            body = "Internal Server Error"
        await self._send_error(send, 500, body)
