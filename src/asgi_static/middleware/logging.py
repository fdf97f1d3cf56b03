# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Logging Middleware - HTTP request/response access logging.

Log format:
    Request:  "<- GET /docs/ from 192.168.1.1"
    Response: "-> GET /docs/ 200 1534B (12.5ms)"  (body bytes sent)
    Error:    "-> GET /docs/ ERROR: ... (12.5ms)"

Config:
    logger_name (str): Logger name. Default: "asgi_static.access".
    level (str): Log level (DEBUG, INFO, WARNING, ERROR). Default: "INFO".
    include_query (bool): Include query string in request log. Default: True.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from . import BaseMiddleware

if TYPE_CHECKING:
    from ..types import ASGIApp, Message, Receive, Scope, Send


class LoggingMiddleware(BaseMiddleware):
    """Access logging middleware for HTTP requests.

    Class Attributes:
        middleware_name: "logging" - identifier for config.
        middleware_order: 200 - inside errors, so failures are logged before
            being turned into responses.
        middleware_default: False - disabled by default.
    """

    middleware_name = "logging"
    middleware_order = 200
    middleware_default = False

    __slots__ = ("logger", "level", "include_query")

    def __init__(
        self,
        app: ASGIApp,
        logger_name: str = "asgi_static.access",
        level: str = "INFO",
        include_query: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        self.logger = logging.getLogger(logger_name)
        self.level = getattr(logging, level.upper(), logging.INFO)
        self.include_query = include_query

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        method = scope.get("method", "?")
        path = scope.get("path", "/")
        query = scope.get("query_string", b"").decode("latin-1")

        request_info = f"{method} {path}"
        if self.include_query and query:
            request_info += f"?{query}"

        client = scope.get("client")
        client_ip = client[0] if client else "unknown"

        self.logger.log(self.level, "<- %s from %s", request_info, client_ip)

        status_code: int = 0
        sent_bytes = 0

        async def send_with_logging(message: Message) -> None:
            nonlocal status_code, sent_bytes
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            elif message["type"] == "http.response.body":
                sent_bytes += len(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, send_with_logging)
        except Exception as e:
            duration = (time.perf_counter() - start_time) * 1000
            self.logger.error("-> %s ERROR: %s (%.1fms)", request_info, e, duration)
            raise

        duration = (time.perf_counter() - start_time) * 1000
        self.logger.log(
            self.level, "-> %s %s %dB (%.1fms)", request_info, status_code, sent_bytes, duration
        )
