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
asgi-static CLI entry point.

Usage:
    asgi-static serve ./public                    # Serve on 127.0.0.1:8000
    asgi-static serve ./public --browse --port 9000
    asgi-static serve ./dist --html5 --prefix /app
    asgi-static serve --config static.toml

Options given on the command line override the [static] table of the
config file.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from . import __version__
from .config import ConfigError, StaticConfig, load_config
from .middleware import middleware_chain
from .routing import Router
from .types import ASGIApp

logger = logging.getLogger("asgi_static")


def build_app(
    config: StaticConfig,
    prefix: str = "/",
    debug: bool = False,
    access_log: bool = False,
) -> ASGIApp:
    """Assemble errors -> logging -> static -> not found.

    With a prefix other than "/", the static middleware is mounted on the
    wildcard route ``<prefix>/*`` and every other path is not found.
    """
    options: dict[str, Any] = {
        "errors_middleware": {"debug": debug},
        "static_middleware": {"config": config},
    }
    prefix = "/" + prefix.strip("/")
    if prefix == "/":
        return middleware_chain(
            {"errors": True, "logging": access_log, "static": True},
            Router.not_found,
            options,
        )

    router = Router()
    router.add(
        prefix + "/*",
        middleware_chain({"errors": False, "static": True}, Router.not_found, options),
    )
    return middleware_chain({"errors": True, "logging": access_log}, router, options)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="asgi-static", description="Serve static files")
    parser.add_argument("--version", "-v", action="version", version=f"asgi-static {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Serve a directory over HTTP")
    serve.add_argument("directory", nargs="?", help="Directory to serve (default: config root or .)")
    serve.add_argument("--config", "-c", help="TOML file with a [static] table")
    serve.add_argument("--host", default="127.0.0.1", help="Server host (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Server port (default: 8000)")
    serve.add_argument("--prefix", default="/", help="URL prefix to mount under (default: /)")
    serve.add_argument("--index", default=None, help="Index file (default: index.html)")
    serve.add_argument("--html5", action="store_true", default=None, help="SPA fallback to index")
    serve.add_argument("--browse", action="store_true", default=None, help="Directory listing")
    serve.add_argument("--debug", action="store_true", help="Tracebacks in 500 responses")
    serve.add_argument("--access-log", action="store_true", help="Log every request")
    return parser


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the static server under uvicorn."""
    import uvicorn

    try:
        data: dict[str, Any] = {}
        if args.config:
            data = load_config(args.config).get("static", {})
        config = StaticConfig.from_mapping(
            data,
            root=args.directory,
            index=args.index,
            html5=args.html5,
            browse=args.browse,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = build_app(config, prefix=args.prefix, debug=args.debug, access_log=args.access_log)
    logger.info("Serving %s on http://%s:%s%s", config.root, args.host, args.port, args.prefix)
    try:
        uvicorn.run(app, host=args.host, port=args.port, lifespan="off", access_log=False)
    except KeyboardInterrupt:
        print("\nShutdown.")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = _parser().parse_args(argv)
    if args.command == "serve":
        return cmd_serve(args)
    return 1


if __name__ == "__main__":
    sys.exit(main())
