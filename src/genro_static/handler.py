# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Static file handler - one request in, one response decision out.

Flow per request::

    StaticRequest
        │
        ├── method not GET/HEAD ──────────────► None (declined)
        │
        ▼
    resolve(root, segments)
        ├── NeedsRedirect ── build_redirect() ─► RedirectTo (301)
        ├── Missing ───────────────────────────► NotFound (404)
        ├── FileError ─────────────────────────► IoError (403/404/500)
        └── File / Index
                │  cache policy attached?
                ├── no ────────────────────────► Ok
                └── yes: negotiate()
                        ├── not modified ──────► NotModified (304)
                        └── otherwise ─────────► Ok + cache headers

The handler holds only the root and the optional CachePolicy, both fixed at
construction. Calls are synchronous, do blocking filesystem I/O and share no
mutable state, so one instance can serve concurrent requests from worker
threads.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import quote, unquote

from .cache import CachePolicy, negotiate
from .decision import ResponseDecision, assemble
from .exceptions import FileError
from .redirect import build_redirect
from .resolver import File, NeedsRedirect, resolve, split_path
from .types import Scope

__all__ = ["RequestHandler", "StaticHandler", "StaticRequest", "SAFE_METHODS", "full_path"]

SAFE_METHODS = frozenset({"GET", "HEAD"})


class StaticRequest:
    """Per-request input of the handler.

    Attributes:
        segments: Percent-decoded URL path segments (see split_path).
        method: Upper-case HTTP method.
        url: Request URL as seen by the handler.
        original_url: URL before any mount/rewrite, or None.
        if_modified_since: Raw If-Modified-Since header value, or None.
    """

    __slots__ = ("segments", "method", "url", "original_url", "if_modified_since")

    def __init__(
        self,
        segments: Sequence[str],
        method: str = "GET",
        url: str = "/",
        original_url: str | None = None,
        if_modified_since: str | None = None,
    ) -> None:
        self.segments = list(segments)
        self.method = method.upper()
        self.url = url
        self.original_url = original_url
        self.if_modified_since = if_modified_since

    @classmethod
    def from_path(cls, path: str, **kwargs: str | None) -> StaticRequest:
        """Build from a percent-encoded URL path such as "/a%20b/"."""
        kwargs.setdefault("url", path)
        return cls(split_path(path), **kwargs)  # type: ignore[arg-type]

    @classmethod
    def from_scope(cls, scope: Scope) -> StaticRequest:
        """Build from an ASGI HTTP scope.

        Segments come from the undecoded raw_path when it matches path, so
        an encoded "%2F" stays inside its segment. Only the part of the path
        below root_path is resolved; a non-empty root_path (set by the server
        or a mount) makes original_url the full URL the client requested.
        """
        headers = {
            name.decode("latin-1").lower(): value.decode("latin-1")
            for name, value in scope.get("headers", [])
        }
        root = scope.get("root_path", "").rstrip("/")
        path = scope.get("path", "/")
        encoded = _encoded_path(path, scope.get("raw_path"))
        if full_path(scope) != path:
            encoded = quote(root) + encoded
        route = _below_root(encoded, root)

        base = _base_url(scope, headers)
        query = scope.get("query_string", b"").decode("latin-1")
        suffix = f"?{query}" if query else ""

        return cls(
            split_path(route),
            method=scope.get("method", "GET"),
            url=f"{base}{route}{suffix}",
            original_url=f"{base}{encoded}{suffix}" if root else None,
            if_modified_since=headers.get("if-modified-since"),
        )

    def __repr__(self) -> str:
        return f"StaticRequest(method={self.method!r}, url={self.url!r})"


def full_path(scope: Scope) -> str:
    """Decoded request path including root_path.

    Current servers (uvicorn 0.26 and later) keep root_path inside path, as
    ASGI now requires; older ones strip it, and it is put back here.
    """
    path: str = scope.get("path", "/")
    root = scope.get("root_path", "").rstrip("/")
    if root and path != root and not path.startswith(root + "/"):
        return root + path
    return path


def _encoded_path(path: str, raw_path: bytes | None) -> str:
    if raw_path:
        candidate = raw_path.decode("latin-1")
        if unquote(candidate) == path:
            return candidate
    return quote(path)


def _below_root(encoded: str, root: str) -> str:
    """Encoded remainder of a full encoded path below the decoded root."""
    depth = root.count("/")
    parts = encoded.split("/")
    if unquote("/".join(parts[: depth + 1])) == root:
        rest = parts[depth + 1 :]
        return "/" + "/".join(rest) if rest else ""
    return quote(unquote(encoded)[len(root):])


def _base_url(scope: Scope, headers: dict[str, str]) -> str:
    scheme = str(scope.get("scheme", "http"))
    netloc = headers.get("host")
    if not netloc:
        server = scope.get("server")
        if server:
            host, port = server
            if (scheme == "http" and port == 80) or (scheme == "https" and port == 443):
                netloc = host
            else:
                netloc = f"{host}:{port}"
        else:
            netloc = "localhost"
    return f"{scheme}://{netloc}"


@runtime_checkable
class RequestHandler(Protocol):
    """A component that answers a request with a decision, or declines (None)."""

    def handle(self, request: StaticRequest) -> ResponseDecision | None:
        """Return the response decision, or None to let the pipeline continue."""
        ...


class StaticHandler:
    """Serves files from a single filesystem root.

    Incoming URL paths are mapped onto the filesystem by appending their
    segments to the root. A regular file is served; a directory holding an
    index.html serves the index when the URL ends with "/" and redirects
    there otherwise. Anything else is a 404.

    Attributes:
        root: Serving root, resolved to an absolute path.
        cache: CachePolicy, or None when conditional GET is disabled.

    Example:
        >>> handler = StaticHandler("./public").with_cache(timedelta(days=30))
        >>> decision = handler.handle(StaticRequest.from_path("/docs/"))
    """

    __slots__ = ("_root", "_cache", "logger")

    def __init__(
        self,
        root: str | Path,
        cache: CachePolicy | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._root = Path(root).resolve()
        self._cache = cache
        self.logger = logger or logging.getLogger("genro_static")

    @property
    def root(self) -> Path:
        return self._root

    @property
    def cache(self) -> CachePolicy | None:
        return self._cache

    def with_cache(self, duration: int | float | timedelta | CachePolicy) -> StaticHandler:
        """Return a new handler with conditional GET enabled.

        Args:
            duration: Advertised max-age (seconds, timedelta or CachePolicy).
        """
        policy = duration if isinstance(duration, CachePolicy) else CachePolicy(duration)
        return StaticHandler(self._root, cache=policy, logger=self.logger)

    def handle(self, request: StaticRequest) -> ResponseDecision | None:
        """Decide the response for one request.

        Returns:
            ResponseDecision, or None for methods other than GET and HEAD.
        """
        if request.method not in SAFE_METHODS:
            return None

        try:
            outcome = resolve(self._root, request.segments)
        except FileError as e:
            self.logger.warning(f"Cannot serve {request.url}: {e.error}")
            return assemble(e)

        if isinstance(outcome, NeedsRedirect):
            target = build_redirect(request.url, request.original_url)
            self.logger.debug(f"Redirecting {request.url} to {target.location}")
            return assemble(outcome, redirect=target)

        negotiation = None
        if isinstance(outcome, File) and self._cache is not None:
            negotiation = negotiate(outcome.metadata, request.if_modified_since, self._cache)

        decision = assemble(outcome, negotiation)
        if isinstance(outcome, File):
            self.logger.debug(f"{request.url}: {decision!r} from {outcome.path}")
        return decision

    def __repr__(self) -> str:
        return f"StaticHandler(root={str(self._root)!r}, cache={self._cache!r})"
