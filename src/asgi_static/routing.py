# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Router - minimal ASGI router with exact and wildcard routes.

Patterns are compared with the encoded request target (raw path). A
pattern ending in ``*`` matches every target starting with the text before
the star; the rest of the target is stored, still encoded, in
``scope["path_params"]["*"]``. The matched pattern goes in
``scope["route"]``, which is how StaticMiddleware knows it was mounted
under a prefix.

Usage:
    router = Router()
    router.add("/static*", StaticMiddleware(Router.not_found, root="./assets"))

    @router.route("/health")
    async def health(scope, receive, send):
        await Response("ok")(scope, receive, send)

Routes are tried in registration order. No match raises HTTPNotFound.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from .exceptions import HTTPNotFound
from .request import Request

if TYPE_CHECKING:
    from .types import ASGIApp, Receive, Scope, Send

__all__ = ["Route", "Router"]


class Route:
    """A pattern bound to an ASGI app."""

    __slots__ = ("pattern", "app", "prefix", "wildcard")

    def __init__(self, pattern: str, app: ASGIApp) -> None:
        if not pattern.startswith("/"):
            raise ValueError(f"Route pattern must start with '/': {pattern!r}")
        if "*" in pattern[:-1]:
            raise ValueError(f"'*' is only allowed at the end of a pattern: {pattern!r}")
        self.pattern = pattern
        self.app = app
        self.wildcard = pattern.endswith("*")
        self.prefix = pattern[:-1] if self.wildcard else pattern

    def match(self, target: str) -> dict[str, str] | None:
        """Return path params if target matches, else None."""
        if self.wildcard:
            if target.startswith(self.prefix):
                return {"*": target[len(self.prefix):]}
            # "/static/*" also matches "/static"
            if len(self.prefix) > 1 and self.prefix.endswith("/") and target == self.prefix[:-1]:
                return {"*": ""}
            return None
        return {} if target == self.pattern else None

    def __repr__(self) -> str:
        return f"Route({self.pattern!r})"


class Router:
    """Dispatch HTTP requests to the first matching route."""

    __slots__ = ("routes",)

    def __init__(self, routes: list[Route] | None = None) -> None:
        self.routes: list[Route] = list(routes or [])

    def add(self, pattern: str, app: ASGIApp) -> Route:
        route = Route(pattern, app)
        self.routes.append(route)
        return route

    def route(self, pattern: str) -> Callable[[ASGIApp], ASGIApp]:
        """Decorator form of add()."""

        def decorator(app: ASGIApp) -> ASGIApp:
            self.add(pattern, app)
            return app

        return decorator

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        target = Request(scope).raw_path
        for route in self.routes:
            params = route.match(target)
            if params is None:
                continue
            scope["route"] = route.pattern
            scope["path_params"] = {**(scope.get("path_params") or {}), **params}
            await route.app(scope, receive, send)
            return

        raise HTTPNotFound()

    @staticmethod
    async def not_found(scope: Scope, receive: Receive, send: Send) -> None:
        """Terminal ``next`` app: always reports not found."""
        if scope["type"] == "http":
            raise HTTPNotFound()
