# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Access log middleware.

One line when the request arrives and one when the response is complete::

    <- GET /static/docs/ from 192.168.1.1
    -> GET /static/docs/ 200 5120B (1.5ms)
    -> GET /static/docs ERROR: ... (0.3ms)

The logged path includes root_path, so a mounted request shows the URL the
client asked for. Bytes are body bytes actually sent: HEAD, 304 and 301
without a body log 0B.

Config (``logging_middleware`` section):
    logger_name: Default "genro_static.access".
    level: Level of the access lines. Default "INFO".
    include_headers: Also log request headers at DEBUG. Default False.
    include_query: Append the query string to the path. Default True.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, MutableMapping

from . import BaseMiddleware
from ..handler import full_path

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send


def request_line(scope: Scope, include_query: bool = True) -> str:
    """``METHOD /full/path[?query]`` for a request scope."""
    line = f"{scope.get('method', '?')} {full_path(scope)}"
    query = scope.get("query_string", b"").decode("latin-1")
    if include_query and query:
        line = f"{line}?{query}"
    return line


class LoggingMiddleware(BaseMiddleware):
    """Writes an access log entry per HTTP request."""

    middleware_name = "logging"
    middleware_order = 200
    middleware_default = False

    __slots__ = ("logger", "level", "include_headers", "include_query")

    def __init__(
        self,
        app: ASGIApp,
        logger_name: str = "genro_static.access",
        level: str = "INFO",
        include_headers: bool = False,
        include_query: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        self.logger = logging.getLogger(logger_name)
        self.level = logging.getLevelName(level.upper())
        if not isinstance(self.level, int):
            self.level = logging.INFO
        self.include_headers = include_headers
        self.include_query = include_query

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        line = request_line(scope, self.include_query)
        client = scope.get("client")
        self.logger.log(self.level, f"<- {line} from {client[0] if client else 'unknown'}")
        if self.include_headers:
            headers = [
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in scope.get("headers", [])
            ]
            self.logger.debug(f"   Headers: {headers}")

        status = 0
        body_bytes = 0

        async def counting_send(message: MutableMapping[str, Any]) -> None:
            nonlocal status, body_bytes
            if message["type"] == "http.response.start":
                status = message.get("status", 0)
            elif message["type"] == "http.response.body":
                body_bytes += len(message.get("body", b""))
            await send(message)

        started = time.perf_counter()
        try:
            await self.app(scope, receive, counting_send)
        except Exception as e:
            self.logger.error(f"-> {line} ERROR: {e} ({_elapsed_ms(started):.1f}ms)")
            raise
        self.logger.log(
            self.level, f"-> {line} {status} {body_bytes}B ({_elapsed_ms(started):.1f}ms)"
        )


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
