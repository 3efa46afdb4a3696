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
StaticServer - ASGI entry point serving one directory.

Request flow::

    ASGI Server (uvicorn) → StaticServer.__call__
        → ErrorMiddleware → [LoggingMiddleware] → app

    app is StaticFiles(directory) when no prefix is configured, or a
    StaticFilesMiddleware mounted at prefix wrapping a 404 app otherwise.

Usage::

    server = StaticServer(directory="./public", cache=86400)
    server.run()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .decision import NotFound
from .middleware import middleware_chain
from .middleware.static import StaticFilesMiddleware
from .static import StaticFiles
from .config import ServerConfig
from .types import ASGIApp, Receive, Scope, Send

__all__ = ["StaticServer"]


async def not_found_app(scope: Scope, receive: Receive, send: Send) -> None:
    """Innermost app under a prefix mount: everything outside it is a 404."""
    if scope["type"] != "http":
        return
    decision = NotFound()
    await send({
        "type": "http.response.start",
        "status": decision.status_code,
        "headers": [(k.encode(), v.encode()) for k, v in decision.headers],
    })
    await send({"type": "http.response.body", "body": (decision.body or "").encode()})


class StaticServer:
    """
    ASGI server serving a static directory.

    Attributes:
        config: ServerConfig with merged options.
        app: The ASGI app with its middleware chain.
        logger: Server logger.
    """

    __slots__ = ("config", "app", "logger")

    def __init__(
        self,
        directory: str | Path | None = None,
        host: str | None = None,
        port: int | None = None,
        prefix: str | None = None,
        cache: int | None = None,
        argv: list[str] | None = None,
        config_dir: str | Path | None = None,
    ) -> None:
        """Initialize StaticServer."""
        self.config = ServerConfig(
            directory=directory,
            host=host,
            port=port,
            prefix=prefix,
            cache=cache,
            argv=argv,
            config_dir=config_dir,
        )
        self.logger = logging.getLogger("genro_static")
        self.app = middleware_chain(
            self.config.middleware, self._build_app(), full_config=self.config._opts
        )

    def _build_app(self) -> ASGIApp:
        cache = self.config.cache or None
        if self.config.prefix:
            return StaticFilesMiddleware(
                not_found_app,
                directory=self.config.directory,
                prefix=self.config.prefix,
                cache=cache,
            )
        return StaticFiles(self.config.directory, cache=cache)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Handle ASGI request. Lifespan events are acknowledged and ignored."""
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        await self.app(scope, receive, send)

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                self.logger.info(f"Serving {self.config.directory}")
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    def run(self, **uvicorn_options: Any) -> None:
        """Run the server using Uvicorn."""
        import uvicorn

        host = self.config.server["host"]
        port = self.config.server["port"]

        self.logger.info(f"Starting server on {host}:{port}")
        uvicorn.run(self, host=host, port=port, **uvicorn_options)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"StaticServer(directory={str(self.config.directory)!r}, prefix={self.config.prefix!r})"
