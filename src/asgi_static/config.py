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
Configuration for the static middleware.

StaticConfig is the single, immutable record the middleware reads on every
request. It is built once at construction time, either from keyword
arguments or from the ``[static]`` table of a TOML file::

    [static]
    root = "./public"
    index = "index.html"
    html5 = true
    browse = false

Options:
    root    Base directory for all resolution. Default: "."
    index   File name looked up inside directories. Default: "index.html"
    html5   Serve root/index when the next app reports not found. Default: false
    browse  Render a listing for directories without index. Default: false
    skipper Predicate ``(request) -> bool``; True bypasses the middleware.
            Python only, cannot come from a file. Default: never skip.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

# Python 3.11+ has tomllib in stdlib
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

if TYPE_CHECKING:
    from .request import Request

__all__ = [
    "ConfigError",
    "Skipper",
    "StaticConfig",
    "default_skipper",
    "load_config",
]

logger = logging.getLogger("asgi_static")

Skipper = Callable[["Request"], bool]


class ConfigError(Exception):
    """Configuration error."""


def default_skipper(request: Request) -> bool:
    """Never skip."""
    return False


class StaticConfig:
    """Immutable static middleware options.

    Attributes are fixed after __init__; assigning raises AttributeError.

    Example:
        >>> config = StaticConfig(root="./public", html5=True)
        >>> config.index
        'index.html'
    """

    __slots__ = ("root", "index", "html5", "browse", "skipper")

    FILE_KEYS = ("root", "index", "html5", "browse")

    root: str
    index: str
    html5: bool
    browse: bool
    skipper: Skipper

    def __init__(
        self,
        root: str | os.PathLike[str] = ".",
        index: str = "index.html",
        html5: bool = False,
        browse: bool = False,
        skipper: Skipper | None = None,
    ) -> None:
        root = os.fspath(root)
        if not root:
            raise ConfigError("root directory is required")
        if not index:
            raise ConfigError("index file name cannot be empty")
        if os.path.isabs(index) or ".." in Path(index).parts:
            raise ConfigError(f"index must be a path relative to the directory: {index!r}")
        if skipper is not None and not callable(skipper):
            raise ConfigError("skipper must be callable")
        if not os.path.isdir(root):
            logger.warning("Static root %s is not a directory", root)

        object.__setattr__(self, "root", root)
        object.__setattr__(self, "index", index)
        object.__setattr__(self, "html5", bool(html5))
        object.__setattr__(self, "browse", bool(browse))
        object.__setattr__(self, "skipper", skipper or default_skipper)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], **overrides: Any) -> StaticConfig:
        """Build a config from a mapping such as the [static] TOML table.

        Args:
            data: Option values keyed by name. Unknown keys are rejected.
            **overrides: Values taking precedence over data (None is ignored).

        Raises:
            ConfigError: If data has unknown keys or wrongly typed values.
        """
        unknown = sorted(set(data) - set(cls.FILE_KEYS))
        if unknown:
            raise ConfigError(f"Unknown static option(s): {', '.join(unknown)}")
        values: dict[str, Any] = dict(data)
        values.update({k: v for k, v in overrides.items() if v is not None})
        for key in ("html5", "browse"):
            if key in values and not isinstance(values[key], bool):
                raise ConfigError(f"Option '{key}' must be a boolean")
        for key in ("root", "index"):
            if key in values and not isinstance(values[key], (str, os.PathLike)):
                raise ConfigError(f"Option '{key}' must be a string")
        return cls(**values)

    def replace(self, **changes: Any) -> StaticConfig:
        """Return a copy with some options changed."""
        values = {name: getattr(self, name) for name in self.__slots__}
        values.update(changes)
        return type(self)(**values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StaticConfig):
            return NotImplemented
        return all(getattr(self, n) == getattr(other, n) for n in self.__slots__)

    def __hash__(self) -> int:
        return hash(tuple(getattr(self, n) for n in self.__slots__))

    def __repr__(self) -> str:
        return (
            f"StaticConfig(root={self.root!r}, index={self.index!r}, "
            f"html5={self.html5}, browse={self.browse})"
        )


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load configuration from a TOML file.

    Args:
        path: Path to TOML configuration file.

    Returns:
        Parsed configuration dict.

    Raises:
        ConfigError: If file not found or invalid TOML.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
