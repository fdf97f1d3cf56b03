# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Static Files Middleware.

Serves files from a root directory and hands everything it cannot serve to
the wrapped app (``next``).

Dispatch:
    1. skipper(request) is true: delegate to next, touch nothing.
    2. Take the request path. On a wildcard route (``/static*``) only the
       wildcard remainder counts, so the middleware works the same mounted
       at "/" or under a prefix.
    3. Percent-decode it. Malformed escapes raise PathDecodeError.
    4. Join root with the path normalised as absolute ("/" + path), which
       collapses every ".." at the root boundary.
    5. stat the candidate:
       - missing: call next; if next raises not found and html5 is on,
         serve root/index instead.
       - regular file: serve it.
       - directory: serve its index file if that is a regular file, else
         render a listing when browse is on, else call next.
       - anything else (FIFO, socket, device): same as missing.

Only "not found" leads to next. Any other OSError (permission denied, I/O
error) propagates, as do errors raised by next itself.

Config options:
    root: Base directory. Default: "."
    index: Index file name for directories. Default: "index.html"
    html5: SPA fallback to root/index on not found. Default: False
    browse: Directory listing. Default: False
    skipper: Predicate (Request) -> bool. Default: never skip.
    config: A prebuilt StaticConfig, exclusive with the options above.
"""

from __future__ import annotations

import logging
import os
import posixpath
import stat
from typing import TYPE_CHECKING, Any

from . import BaseMiddleware
from ..config import Skipper, StaticConfig
from ..exceptions import is_not_found
from ..listing import render_listing
from ..request import Request, decode_path
from ..response import FileResponse, Response

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send

__all__ = ["StaticMiddleware", "resolve_path"]

logger = logging.getLogger("asgi_static")

_NOT_FOUND = (FileNotFoundError, NotADirectoryError)


def resolve_path(root: str, url_path: str) -> str:
    """Map a decoded URL path to a filesystem path under root.

    The path is normalised as an absolute path before the join, so ".."
    segments cannot climb above root. Symlinks are not resolved.

    >>> resolve_path("/srv/www", "/../../etc/passwd")
    '/srv/www/etc/passwd'
    """
    if os.sep != "/":
        url_path = url_path.replace(os.sep, "/")
    clean = posixpath.normpath("/" + url_path)
    # normpath keeps a leading "//" as is
    relative = clean.lstrip("/")
    if not relative:
        return root
    if os.sep != "/":
        relative = relative.replace("/", os.sep)
    return os.path.join(root, relative)


class StaticMiddleware(BaseMiddleware):
    """Serve files, index files and directory listings from a root directory.

    Attributes:
        config: Immutable StaticConfig read on every request.

    Example:
        >>> app = StaticMiddleware(Router.not_found, root="./public", html5=True)
    """

    middleware_name = "static"
    middleware_order = 600
    middleware_default = False

    __slots__ = ("config",)

    def __init__(
        self,
        app: ASGIApp,
        root: str | os.PathLike[str] | None = None,
        index: str | None = None,
        html5: bool | None = None,
        browse: bool | None = None,
        skipper: Skipper | None = None,
        config: StaticConfig | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        options = {
            "root": root,
            "index": index,
            "html5": html5,
            "browse": browse,
            "skipper": skipper,
        }
        if config is None:
            config = StaticConfig(**{k: v for k, v in options.items() if v is not None})
        elif any(v is not None for v in options.values()):
            raise TypeError("Pass either config or individual options, not both")
        self.config = config

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI interface - serve from the filesystem or delegate to next."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        if self.config.skipper(request):
            logger.debug("Skipping %s", request.path)
            await self.app(scope, receive, send)
            return

        url_path = decode_path(self._request_path(request))
        name = resolve_path(self.config.root, url_path)

        try:
            st = os.stat(name)
        except _NOT_FOUND:
            await self._not_found(scope, receive, send, url_path)
            return

        if stat.S_ISDIR(st.st_mode):
            await self._directory(scope, receive, send, name)
        elif stat.S_ISREG(st.st_mode):
            logger.debug("Serving file %s", name)
            await FileResponse(name)(scope, receive, send)
        else:
            # FIFOs, sockets and devices are never served
            await self._not_found(scope, receive, send, url_path)

    async def _directory(self, scope: Scope, receive: Receive, send: Send, name: str) -> None:
        index = os.path.join(name, self.config.index)
        try:
            has_index = stat.S_ISREG(os.stat(index).st_mode)
        except _NOT_FOUND:
            has_index = False

        if has_index:
            logger.debug("Serving index %s", index)
            await FileResponse(index)(scope, receive, send)
        elif self.config.browse:
            logger.debug("Listing directory %s", name)
            await Response(render_listing(name), media_type="text/html")(scope, receive, send)
        else:
            logger.debug("No index in %s, delegating", name)
            await self.app(scope, receive, send)

    @staticmethod
    def _request_path(request: Request) -> str:
        # Mounted on a wildcard route, e.g. "/static*"
        if request.route.endswith("*"):
            return str(request.path_params.get("*", ""))
        return request.raw_path

    async def _not_found(self, scope: Scope, receive: Receive, send: Send, url_path: str) -> None:
        """Delegate to next, falling back to the root index in html5 mode."""
        try:
            await self.app(scope, receive, send)
        except Exception as e:
            if not (self.config.html5 and is_not_found(e)):
                raise
            fallback = os.path.join(self.config.root, self.config.index)
            logger.debug("Not found %s, serving %s", url_path, fallback)
            await FileResponse(fallback)(scope, receive, send)

    def __repr__(self) -> str:
        return f"StaticMiddleware({self.config!r})"
