# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Static Files Middleware - mounts a StaticFiles app under a URL prefix."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

from . import BaseMiddleware
from ..cache import CachePolicy
from ..decision import NotFound
from ..handler import StaticRequest, full_path
from ..static import StaticFiles

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send


class StaticFilesMiddleware(BaseMiddleware):
    """Static files middleware - serves files from a directory under a prefix.

    Requests under ``prefix`` are served with the prefix appended to
    ``root_path``, so a directory redirect points back under the prefix.
    Requests outside the prefix and methods the handler declines (anything
    but GET/HEAD) go to the wrapped app.

    Config options:
        directory: Directory containing static files. Required.
        prefix: URL prefix for static files. Default: "/static"
        cache: max-age in seconds; 0 or None disables conditional GET.
        fallthrough: Pass 404s to the wrapped app instead of answering them.
            Default: False
    """

    middleware_name = "static"
    middleware_order = 600

    __slots__ = ("static", "prefix", "fallthrough")

    def __init__(
        self,
        app: ASGIApp,
        directory: str | Path | None = None,
        prefix: str = "/static",
        cache: int | float | timedelta | CachePolicy | None = None,
        fallthrough: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        if directory is None:
            raise ValueError(
                "static middleware requires the 'directory' option (static_middleware.directory)"
            )
        self.static = StaticFiles(directory, cache=cache)
        self.prefix = prefix.rstrip("/")
        self.fallthrough = fallthrough

    def _mounted_scope(self, scope: Scope) -> Scope | None:
        """Return the scope as seen under the mount, or None if not under prefix.

        The child keeps the full path and gets the prefix appended to its
        root_path, as ASGI servers hand it to an app mounted under root_path.
        """
        root = scope.get("root_path", "").rstrip("/")
        path = full_path(scope)
        route = path[len(root):]
        if self.prefix and route != self.prefix and not route.startswith(self.prefix + "/"):
            return None
        child = dict(scope)
        child["root_path"] = root + self.prefix
        if path != scope.get("path", "/"):
            child["path"] = path
            child["raw_path"] = None
        return child

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI interface - serve static files or pass through."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        child = self._mounted_scope(scope)
        if child is None:
            await self.app(scope, receive, send)
            return

        request = StaticRequest.from_scope(child)
        decision = await self.static.decide(request)
        if decision is None or (self.fallthrough and isinstance(decision, NotFound)):
            await self.app(scope, receive, send)
            return

        await self.static.send_decision(send, decision, include_body=(request.method != "HEAD"))
