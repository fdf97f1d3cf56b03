# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for ErrorMiddleware, LoggingMiddleware and middleware_chain."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

from asgi_static.exceptions import HTTPException, HTTPNotFound, PathDecodeError
from asgi_static.middleware import MIDDLEWARE_REGISTRY, middleware_chain
from asgi_static.middleware.errors import ErrorMiddleware
from asgi_static.middleware.logging import LoggingMiddleware
from asgi_static.middleware.static import StaticMiddleware
from asgi_static.response import Response
from asgi_static.routing import Router
from conftest import MockSend, make_scope, mock_receive


def raising(error: Exception):
    async def app(scope: Any, receive: Any, send: Any) -> None:
        raise error

    return app


async def ok_app(scope: Any, receive: Any, send: Any) -> None:
    await Response("ok")(scope, receive, send)


class TestErrorMiddleware:
    """Exceptions become HTTP responses."""

    @pytest.mark.asyncio
    async def test_not_found(self, send: MockSend) -> None:
        await ErrorMiddleware(raising(HTTPNotFound()))(make_scope(), mock_receive, send)

        assert send.status == 404
        assert send.body == b"Not found"
        assert send.headers[b"content-type"] == b"text/plain; charset=utf-8"

    @pytest.mark.asyncio
    async def test_http_exception_headers(self, send: MockSend) -> None:
        exc = HTTPException(401, detail="Auth required", headers={"WWW-Authenticate": "Bearer"})
        await ErrorMiddleware(raising(exc))(make_scope(), mock_receive, send)

        assert send.status == 401
        assert send.headers[b"www-authenticate"] == b"Bearer"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, status",
        [
            (PathDecodeError("/%zz", 1), 400),
            (PermissionError(13, "Permission denied"), 403),
            (FileNotFoundError(2, "No such file"), 404),
        ],
    )
    async def test_mapped_errors(self, send: MockSend, error: Exception, status: int) -> None:
        await ErrorMiddleware(raising(error))(make_scope(), mock_receive, send)
        assert send.status == status

    @pytest.mark.asyncio
    async def test_unexpected_error(self, send: MockSend, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="asgi_static"):
            await ErrorMiddleware(raising(RuntimeError("boom")))(make_scope(), mock_receive, send)

        assert send.status == 500
        assert send.body == b"Internal Server Error"
        assert "boom" not in send.text
        assert any(r.levelno == logging.ERROR for r in caplog.records)

    @pytest.mark.asyncio
    async def test_debug_traceback(self, send: MockSend) -> None:
        mw = ErrorMiddleware(raising(RuntimeError("boom")), debug=True)
        await mw(make_scope(), mock_receive, send)

        assert send.status == 500
        assert "RuntimeError: boom" in send.text

    @pytest.mark.asyncio
    async def test_error_after_start_reraised(self, send: MockSend) -> None:
        async def half(scope: Any, receive: Any, send: Any) -> None:
            await send({"type": "http.response.start", "status": 200, "headers": []})
            raise OSError("disk gone")

        with pytest.raises(OSError):
            await ErrorMiddleware(half)(make_scope(), mock_receive, send)
        assert len(send.messages) == 1

    @pytest.mark.asyncio
    async def test_success_untouched(self, send: MockSend) -> None:
        await ErrorMiddleware(ok_app)(make_scope(), mock_receive, send)
        assert send.status == 200
        assert send.body == b"ok"


class TestLoggingMiddleware:
    """Access log lines."""

    @pytest.mark.asyncio
    async def test_logs_request_and_response(
        self, send: MockSend, caplog: pytest.LogCaptureFixture
    ) -> None:
        scope = make_scope("/hello.txt", client=("10.0.0.1", 5000))
        with caplog.at_level(logging.INFO, logger="asgi_static.access"):
            await LoggingMiddleware(ok_app)(scope, mock_receive, send)

        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "<- GET /hello.txt from 10.0.0.1"
        assert messages[1].startswith("-> GET /hello.txt 200 2B (")

    @pytest.mark.asyncio
    async def test_logs_bytes_actually_sent(
        self, site: Path, send: MockSend, caplog: pytest.LogCaptureFixture
    ) -> None:
        app = LoggingMiddleware(StaticMiddleware(Router.not_found, root=str(site)))
        with caplog.at_level(logging.INFO, logger="asgi_static.access"):
            await app(make_scope("/docs/guide.txt"), mock_receive, send)
            await app(make_scope("/docs/guide.txt", method="HEAD"), mock_receive, MockSend())

        messages = [r.getMessage() for r in caplog.records]
        assert messages[1].startswith("-> GET /docs/guide.txt 200 1536B (")
        assert messages[3].startswith("-> HEAD /docs/guide.txt 200 0B (")

    @pytest.mark.asyncio
    async def test_logs_and_reraises(
        self, send: MockSend, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="asgi_static.access"):
            with pytest.raises(HTTPNotFound):
                await LoggingMiddleware(Router.not_found)(make_scope("/x"), mock_receive, send)

        assert "ERROR: Not found" in caplog.records[-1].getMessage()
        assert caplog.records[-1].levelno == logging.ERROR

    @pytest.mark.asyncio
    async def test_query_string(self, send: MockSend, caplog: pytest.LogCaptureFixture) -> None:
        scope = make_scope("/a", query_string=b"v=1")
        with caplog.at_level(logging.INFO, logger="asgi_static.access"):
            await LoggingMiddleware(ok_app)(scope, mock_receive, send)

        assert caplog.records[0].getMessage() == "<- GET /a?v=1 from unknown"


class TestMiddlewareChain:
    """Registry and chain building."""

    def test_registry(self) -> None:
        assert MIDDLEWARE_REGISTRY["errors"] is ErrorMiddleware
        assert MIDDLEWARE_REGISTRY["logging"] is LoggingMiddleware
        assert MIDDLEWARE_REGISTRY["static"] is StaticMiddleware

    def test_default_chain_is_errors_only(self) -> None:
        app = middleware_chain({}, ok_app)
        assert isinstance(app, ErrorMiddleware)
        assert app.app is ok_app

    def test_order(self, tmp_path: Path) -> None:
        app = middleware_chain(
            "static, logging",
            Router.not_found,
            {"static_middleware": {"root": str(tmp_path)}},
        )
        assert isinstance(app, ErrorMiddleware)
        assert isinstance(app.app, LoggingMiddleware)
        assert isinstance(app.app.app, StaticMiddleware)
        assert app.app.app.config.root == str(tmp_path)

    def test_disable_default(self) -> None:
        app = middleware_chain({"errors": "off"}, ok_app)
        assert app is ok_app

    def test_unknown_name(self) -> None:
        with pytest.raises(ValueError):
            middleware_chain("gzip", ok_app)

    @pytest.mark.asyncio
    async def test_chain_serves_and_maps_errors(self, site: Path) -> None:
        app = middleware_chain(
            ["static"],
            Router.not_found,
            {"static_middleware": {"root": str(site)}},
        )

        found = MockSend()
        await app(make_scope("/hello.txt"), mock_receive, found)
        assert found.status == 200

        missing = MockSend()
        await app(make_scope("/nope"), mock_receive, missing)
        assert missing.status == 404

        bad = MockSend()
        await app(make_scope("/", raw_path=b"/%zz"), mock_receive, bad)
        assert bad.status == 400
