#!/usr/bin/env python
# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Demo server: directory browsing next to an API route.

Run with:
    python examples/browse_server.py [directory]

Then visit:
    http://127.0.0.1:9000/files/     (listing of directory)
    http://127.0.0.1:9000/api/hello
"""

import sys

import uvicorn

from asgi_static import ErrorMiddleware, Response, Router, StaticMiddleware
from asgi_static.types import Receive, Scope, Send

router = Router()


@router.route("/api/hello")
async def hello(scope: Scope, receive: Receive, send: Send) -> None:
    await Response("Hello from the API", media_type="text/plain")(scope, receive, send)


if __name__ == "__main__":
    root = sys.argv[1] if len(sys.argv) > 1 else "."
    router.add("/files*", StaticMiddleware(Router.not_found, root=root, browse=True))
    uvicorn.run(ErrorMiddleware(router), host="127.0.0.1", port=9000, lifespan="off")
