# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exception classes for asgi-static.

Handlers in the chain signal HTTP errors by raising, never by writing an
error body themselves. ErrorMiddleware sits at the outside of the chain and
turns exceptions into responses.

Exceptions
----------
HTTPException
    Generic HTTP error with status code, detail and optional headers.

HTTPNotFound, HTTPForbidden
    Shortcuts for the common statuses. HTTPNotFound is the "not found"
    signal a ``next`` app raises; StaticMiddleware reacts to it when SPA
    fallback is enabled.

PathDecodeError
    Malformed percent-encoding in a request path. Subclass of ValueError so
    callers decoding paths outside a request can catch it generically.

Example:
    >>> raise HTTPNotFound()
    >>> raise HTTPException(401, detail="Auth required", headers={"WWW-Authenticate": "Bearer"})
"""


class HTTPException(Exception):
    """
    HTTP exception with status code and detail.

    Attributes:
        status_code: HTTP status code (expected 4xx or 5xx, not validated)
        detail: Error detail message
        headers: Response headers as list of tuples (supports duplicate names)
    """

    def __init__(
        self,
        status_code: int,
        detail: str = "",
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
    ) -> None:
        """
        Initialize HTTP exception.

        Args:
            status_code: HTTP status code (4xx, 5xx expected)
            detail: Error detail message (default: "")
            headers: Response headers as dict or list of tuples (default: None).
        """
        self.status_code = status_code
        self.detail = detail
        if headers is None:
            self.headers: list[tuple[str, str]] | None = None
        elif isinstance(headers, dict):
            self.headers = list(headers.items())
        else:
            self.headers = list(headers)
        super().__init__(detail)

    def __repr__(self) -> str:
        return f"HTTPException(status_code={self.status_code}, detail={self.detail!r})"


class HTTPNotFound(HTTPException):
    """HTTP 404 Not Found exception."""

    def __init__(self, detail: str = "Not found") -> None:
        super().__init__(404, detail=detail)


class HTTPForbidden(HTTPException):
    """HTTP 403 Forbidden exception."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(403, detail=detail)


class PathDecodeError(ValueError):
    """Invalid percent-encoding in a request path.

    Attributes:
        path: The undecoded path.
        position: Index of the offending ``%`` in ``path``.
    """

    def __init__(self, path: str, position: int) -> None:
        self.path = path
        self.position = position
        super().__init__(f"invalid escape {path[position:position + 3]!r} in path {path!r}")


def is_not_found(error: BaseException) -> bool:
    """Return True if error is the distinguished "not found" condition."""
    return isinstance(error, HTTPException) and error.status_code == 404
