# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""asgi-static - ASGI middleware serving files from a directory tree.

Main components:
    StaticMiddleware: Files, index files, directory listings, SPA fallback
    StaticConfig: Immutable middleware options
    FileResponse: Streams a file with content type and length
    Router: Exact and wildcard ("/static*") routes

Middleware:
    ErrorMiddleware: Exceptions to HTTP responses
    LoggingMiddleware: Access logging

Usage:
    from asgi_static import Router, StaticMiddleware

    app = StaticMiddleware(Router.not_found, root="./public", browse=True)
"""

__version__ = "0.1.0"

from .config import ConfigError, StaticConfig, default_skipper, load_config
from .exceptions import (
    HTTPException,
    HTTPForbidden,
    HTTPNotFound,
    PathDecodeError,
)
from .listing import DirectoryEntry, format_size, list_directory, render_listing
from .middleware import BaseMiddleware, middleware_chain
from .middleware.errors import ErrorMiddleware
from .middleware.logging import LoggingMiddleware
from .middleware.static import StaticMiddleware, resolve_path
from .request import Request, decode_path
from .response import FileResponse, Response
from .routing import Route, Router
from .types import ASGIApp, Message, Receive, Scope, Send

__all__ = [
    # Middleware
    "BaseMiddleware",
    "ErrorMiddleware",
    "LoggingMiddleware",
    "StaticMiddleware",
    "middleware_chain",
    "resolve_path",
    # Configuration
    "ConfigError",
    "StaticConfig",
    "default_skipper",
    "load_config",
    # Request / Response
    "Request",
    "decode_path",
    "FileResponse",
    "Response",
    # Routing
    "Route",
    "Router",
    # Listing
    "DirectoryEntry",
    "format_size",
    "list_directory",
    "render_listing",
    # Exceptions
    "HTTPException",
    "HTTPForbidden",
    "HTTPNotFound",
    "PathDecodeError",
    # ASGI types
    "ASGIApp",
    "Message",
    "Receive",
    "Scope",
    "Send",
]
