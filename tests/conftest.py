# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Shared test helpers: ASGI message capture and scope building."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest


class MockSend:
    """Capture ASGI send messages for testing."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def start_message(self) -> dict[str, Any]:
        """Get the http.response.start message."""
        return self.messages[0]

    @property
    def body_messages(self) -> list[dict[str, Any]]:
        """Get all http.response.body messages."""
        return [m for m in self.messages if m["type"] == "http.response.body"]

    @property
    def status(self) -> int:
        return self.start_message["status"]

    @property
    def headers(self) -> dict[bytes, bytes]:
        return dict(self.start_message["headers"])

    @property
    def body(self) -> bytes:
        """Get complete body (concatenated from all body messages)."""
        return b"".join(m.get("body", b"") for m in self.body_messages)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


async def mock_receive() -> dict[str, Any]:
    """Mock receive callable (not used by static responses)."""
    return {"type": "http.request", "body": b""}


def make_scope(
    path: str = "/",
    raw_path: bytes | None = None,
    method: str = "GET",
    **extra: Any,
) -> dict[str, Any]:
    """Build a minimal HTTP scope."""
    scope: dict[str, Any] = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [],
    }
    if raw_path is not None:
        scope["raw_path"] = raw_path
    scope.update(extra)
    return scope


@pytest.fixture
def send() -> MockSend:
    """Create a mock send callable."""
    return MockSend()


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Create a site tree under tmp_path/public.

    public/
        index.html
        hello.txt
        style.css
        docs/            (no index)
            guide.txt
            img/
        app/
            index.html
    secret.txt           (outside the root)
    """
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_text("<html>Route index</html>")
    (root / "hello.txt").write_text("Hello, World!")
    (root / "style.css").write_text("body { color: red; }")
    (root / "docs").mkdir()
    (root / "docs" / "guide.txt").write_bytes(b"x" * 1536)
    (root / "docs" / "img").mkdir()
    (root / "app").mkdir()
    (root / "app" / "index.html").write_text("<html>app index</html>")
    (tmp_path / "secret.txt").write_text("top secret")
    return root
