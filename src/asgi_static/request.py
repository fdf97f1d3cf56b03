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
Read-only request view over an ASGI HTTP scope.

Request does not read the body and never touches receive/send: it is what
skipper predicates and the static middleware inspect to make routing
decisions.

Path forms:
    path        Decoded path as given by the server (scope["path"]).
    raw_path    Encoded request target without query string. Taken from
                scope["raw_path"] when the server provides it, otherwise
                rebuilt by quoting scope["path"].
    route       Pattern the router matched (scope["route"]), "" if none.
    path_params Parameters captured by the router; "*" holds the
                still-encoded remainder of a wildcard route.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote, unquote

from .exceptions import PathDecodeError
from .types import Scope

__all__ = ["Request", "decode_path"]

_INVALID_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_path(path: str) -> str:
    """Percent-decode a URL path strictly.

    Every ``%`` must start a two-digit hex escape. Decoded bytes that are
    not valid UTF-8 are kept as surrogates, matching ``os.fsdecode``.

    Raises:
        PathDecodeError: On a malformed escape such as ``%zz`` or a
            trailing ``%``.
    """
    match = _INVALID_ESCAPE.search(path)
    if match is not None:
        raise PathDecodeError(path, match.start())
    return unquote(path, encoding="utf-8", errors="surrogateescape")


class Request:
    """Scope wrapper exposing what routing needs.

    Example:
        >>> request = Request({"type": "http", "method": "GET", "path": "/a b"})
        >>> request.raw_path
        '/a%20b'
    """

    __slots__ = ("_scope",)

    def __init__(self, scope: Scope) -> None:
        self._scope = scope

    @property
    def scope(self) -> Scope:
        return self._scope

    @property
    def method(self) -> str:
        return str(self._scope.get("method", "GET")).upper()

    @property
    def path(self) -> str:
        return self._scope.get("path", "/") or "/"

    @property
    def raw_path(self) -> str:
        raw = self._scope.get("raw_path")
        if raw:
            target = raw.decode("latin-1") if isinstance(raw, bytes) else str(raw)
            # Some servers leave the query string in raw_path
            return target.split("?", 1)[0]
        return quote(self.path, safe="/", encoding="utf-8", errors="surrogateescape")

    @property
    def route(self) -> str:
        return self._scope.get("route") or ""

    @property
    def path_params(self) -> dict[str, Any]:
        return dict(self._scope.get("path_params") or {})

    def __repr__(self) -> str:
        return f"Request(method={self.method!r}, path={self.path!r})"
