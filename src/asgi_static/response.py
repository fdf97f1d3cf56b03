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

"""
HTTP Response classes for ASGI applications.

Classes
=======
Response
    Bytes or string body sent in a single body message. Used for directory
    listings and error pages.

FileResponse
    File-serving primitive. Stats the file when called, sets content-type,
    content-length and last-modified, then streams the file in chunks.
    A missing file raises FileNotFoundError before anything is sent, so
    callers can tell "not found" apart from other I/O errors.

Both are ASGI apps::

    response = FileResponse("public/index.html")
    await response(scope, receive, send)
"""

from __future__ import annotations

import errno
import mimetypes
import os
import stat
from collections.abc import Mapping
from email.utils import formatdate

from .types import Receive, Scope, Send

__all__ = [
    "FileResponse",
    "Response",
    "guess_media_type",
]

# Ensure common types are registered
mimetypes.add_type("application/javascript", ".js")
mimetypes.add_type("text/css", ".css")
mimetypes.add_type("image/svg+xml", ".svg")
mimetypes.add_type("application/json", ".json")
mimetypes.add_type("text/html", ".html")
mimetypes.add_type("text/html", ".htm")

# Type alias for headers input
HeadersInput = Mapping[str, str] | list[tuple[str, str]] | None


def _normalize_headers(
    headers: HeadersInput,
) -> list[tuple[str, str]]:
    """Normalize headers input to list of tuples."""
    if headers is None:
        return []
    if isinstance(headers, list):
        return list(headers)
    return list(headers.items())


def guess_media_type(path: str | os.PathLike[str]) -> str:
    """Guess content type from the file extension.

    Text types and JavaScript get an explicit utf-8 charset. Unknown
    extensions fall back to application/octet-stream.
    """
    content_type, _ = mimetypes.guess_type(os.fspath(path))
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/") or content_type == "application/javascript":
        return f"{content_type}; charset=utf-8"
    return content_type


class Response:
    """
    Base HTTP response class.

    Attributes:
        body: Encoded response body as bytes.
        status_code: HTTP status code.

    Example:
        >>> response = Response(content="<h1>Hi</h1>", media_type="text/html")
        >>> await response(scope, receive, send)
    """

    __slots__ = ("body", "status_code", "_media_type", "_headers")

    media_type: str | None = None
    charset: str = "utf-8"

    def __init__(
        self,
        content: bytes | str | None = None,
        status_code: int = 200,
        headers: HeadersInput = None,
        media_type: str | None = None,
    ) -> None:
        self.status_code = status_code
        self._headers: list[tuple[str, str]] = _normalize_headers(headers)
        self._media_type = media_type
        self.body = self._encode_content(content)

        header_names = {name.lower() for name, _ in self._headers}
        if "content-type" not in header_names:
            content_type = self._get_content_type()
            if content_type:
                self._headers.append(("content-type", content_type))
        if "content-length" not in header_names:
            self._headers.append(("content-length", str(len(self.body))))

    def _encode_content(self, content: bytes | str | None) -> bytes:
        if content is None:
            return b""
        if isinstance(content, bytes):
            return content
        return content.encode(self.charset)

    def _get_content_type(self) -> str | None:
        """Get content-type header value with charset for text types."""
        effective = self._media_type if self._media_type is not None else self.media_type
        if effective is None:
            return None
        if effective.startswith("text/") and "charset" not in effective:
            return f"{effective}; charset={self.charset}"
        return effective

    @property
    def headers(self) -> list[tuple[str, str]]:
        return list(self._headers)

    def _build_headers(self) -> list[tuple[bytes, bytes]]:
        """Build ASGI headers list (lowercased names, latin-1)."""
        return [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers
        ]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Send http.response.start and a single http.response.body."""
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self._build_headers(),
            }
        )
        body = b"" if scope.get("method") == "HEAD" else self.body
        await send({"type": "http.response.body", "body": body})


class FileResponse:
    """
    Stream a file from disk as an HTTP response.

    The file is stat-ed and opened only when the response is called, so a
    file removed in between surfaces as FileNotFoundError rather than as a
    truncated response.

    Attributes:
        path: Filesystem path of the file to send.
        status_code: HTTP status code.
        chunk_size: Bytes read and sent per body message.

    Raises (on call):
        FileNotFoundError: The path does not exist.
        IsADirectoryError: The path is a directory.
        OSError: EINVAL if the path is another kind of non-regular file.
        OSError: Any other stat/open/read failure.
    """

    __slots__ = ("path", "status_code", "chunk_size", "_media_type", "_headers")

    chunk_size_default = 64 * 1024

    def __init__(
        self,
        path: str | os.PathLike[str],
        status_code: int = 200,
        headers: HeadersInput = None,
        media_type: str | None = None,
        chunk_size: int | None = None,
    ) -> None:
        self.path = os.fspath(path)
        self.status_code = status_code
        self.chunk_size = chunk_size or self.chunk_size_default
        self._media_type = media_type
        self._headers = _normalize_headers(headers)

    def _build_headers(self, st: os.stat_result) -> list[tuple[bytes, bytes]]:
        headers = [(name.lower(), value) for name, value in self._headers]
        names = {name for name, _ in headers}
        if "content-type" not in names:
            headers.append(("content-type", self._media_type or guess_media_type(self.path)))
        headers.append(("content-length", str(st.st_size)))
        if "last-modified" not in names:
            headers.append(("last-modified", formatdate(st.st_mtime, usegmt=True)))
        return [(name.encode("latin-1"), value.encode("latin-1")) for name, value in headers]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        st = os.stat(self.path)
        if stat.S_ISDIR(st.st_mode):
            raise IsADirectoryError(errno.EISDIR, "Is a directory", self.path)
        if not stat.S_ISREG(st.st_mode):
            raise OSError(errno.EINVAL, "Not a regular file", self.path)

        if scope.get("method") == "HEAD":
            await send(
                {
                    "type": "http.response.start",
                    "status": self.status_code,
                    "headers": self._build_headers(st),
                }
            )
            await send({"type": "http.response.body", "body": b""})
            return

        with open(self.path, "rb") as f:
            await send(
                {
                    "type": "http.response.start",
                    "status": self.status_code,
                    "headers": self._build_headers(st),
                }
            )
            remaining = st.st_size
            while remaining > 0:
                chunk = f.read(min(self.chunk_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                await send(
                    {
                        "type": "http.response.body",
                        "body": chunk,
                        "more_body": remaining > 0,
                    }
                )
            if remaining == st.st_size or remaining > 0:
                # Empty file, or file shrank while reading
                await send({"type": "http.response.body", "body": b"", "more_body": False})

    def __repr__(self) -> str:
        return f"FileResponse(path={self.path!r}, status_code={self.status_code})"
