# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Response decisions - what the embedding server must send.

Each decision carries the status code, the headers and the body the caller
emits. Ok carries the file path instead of a body: the caller streams it,
or sends nothing for HEAD.

    ┌──────────────┬────────┬──────────────────────────────────────────┐
    │ Decision     │ Status │ Body                                     │
    ├──────────────┼────────┼──────────────────────────────────────────┤
    │ Ok           │ 200    │ file content (streamed by the caller)    │
    │ RedirectTo   │ 301    │ "Redirecting to <location>"              │
    │ NotModified  │ 304    │ none                                     │
    │ NotFound     │ 404    │ "File not found"                         │
    │ IoError      │ 403/404/500 by FileErrorKind                      │
    └──────────────┴────────┴──────────────────────────────────────────┘
"""

from __future__ import annotations

import mimetypes
from pathlib import Path

from .cache import CacheHeaders, Negotiation
from .exceptions import FileError, FileErrorKind
from .redirect import RedirectTarget
from .resolver import File, FileMetadata, Index, NeedsRedirect, ResolutionOutcome

__all__ = [
    "IoError",
    "NotFound",
    "NotModified",
    "Ok",
    "RedirectTo",
    "ResponseDecision",
    "assemble",
    "guess_content_type",
]

PLAIN_TEXT = "text/plain; charset=utf-8"

# Ensure common types are registered
mimetypes.add_type("application/javascript", ".js")
mimetypes.add_type("text/css", ".css")
mimetypes.add_type("image/svg+xml", ".svg")
mimetypes.add_type("application/json", ".json")
mimetypes.add_type("text/html", ".html")
mimetypes.add_type("text/html", ".htm")


def guess_content_type(path: Path) -> str:
    """Content-Type for a file, with utf-8 charset for text types."""
    content_type, _ = mimetypes.guess_type(str(path))
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/") or content_type == "application/javascript":
        return f"{content_type}; charset=utf-8"
    return content_type


class ResponseDecision:
    """Base class for response decisions."""

    __slots__ = ()

    status_code: int = 200

    @property
    def body(self) -> str | None:
        """Plain-text body, or None when there is none to send."""
        return None

    @property
    def headers(self) -> list[tuple[str, str]]:
        """Response headers as lowercase (name, value) pairs."""
        body = self.body
        if body is None:
            return []
        return [
            ("content-type", PLAIN_TEXT),
            ("content-length", str(len(body.encode("utf-8")))),
        ]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code})"


class Ok(ResponseDecision):
    """Serve the file at path.

    Attributes:
        path: File to stream.
        metadata: Metadata read during resolution (size drives Content-Length).
        cache: Cache headers, or None when no CachePolicy is attached.
        is_index: True when the file is a directory index.
    """

    __slots__ = ("path", "metadata", "cache", "is_index")

    status_code = 200

    def __init__(
        self,
        path: Path,
        metadata: FileMetadata,
        cache: CacheHeaders | None = None,
        is_index: bool = False,
    ) -> None:
        self.path = path
        self.metadata = metadata
        self.cache = cache
        self.is_index = is_index

    @property
    def content_type(self) -> str:
        return guess_content_type(self.path)

    @property
    def headers(self) -> list[tuple[str, str]]:
        headers = [
            ("content-type", self.content_type),
            ("content-length", str(self.metadata.size)),
        ]
        if self.cache is not None:
            headers.extend(self.cache.items())
        return headers

    def __repr__(self) -> str:
        return f"Ok(path={str(self.path)!r}, cache={self.cache is not None})"


class RedirectTo(ResponseDecision):
    """301 to the slash-terminated directory URL."""

    __slots__ = ("target",)

    status_code = 301

    def __init__(self, target: RedirectTarget) -> None:
        self.target = target

    @property
    def location(self) -> str:
        return self.target.location

    @property
    def body(self) -> str:
        return self.target.body

    @property
    def headers(self) -> list[tuple[str, str]]:
        return [("location", self.target.location), *super().headers]

    def __repr__(self) -> str:
        return f"RedirectTo(location={self.target.location!r})"


class NotModified(ResponseDecision):
    """304: the client's cached copy is current."""

    __slots__ = ("cache",)

    status_code = 304

    def __init__(self, cache: CacheHeaders | None = None) -> None:
        self.cache = cache

    @property
    def headers(self) -> list[tuple[str, str]]:
        return self.cache.items() if self.cache is not None else []


class NotFound(ResponseDecision):
    """404: no file and no directory index."""

    __slots__ = ()

    status_code = 404

    @property
    def body(self) -> str:
        return "File not found"


class IoError(ResponseDecision):
    """A filesystem failure, mapped to the nearest HTTP status."""

    __slots__ = ("kind",)

    def __init__(self, kind: FileErrorKind) -> None:
        self.kind = kind

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return self.kind.status_code

    @property
    def body(self) -> str:
        return self.kind.detail

    def __repr__(self) -> str:
        return f"IoError(kind={self.kind.name}, status_code={self.status_code})"


def assemble(
    outcome: ResolutionOutcome | FileError,
    negotiation: Negotiation | None = None,
    redirect: RedirectTarget | None = None,
) -> ResponseDecision:
    """Combine a resolution outcome with negotiation/redirect results.

    Args:
        outcome: Resolver outcome, or the FileError raised while resolving.
        negotiation: Cache negotiation result for File/Index outcomes. None
            when no CachePolicy is attached.
        redirect: Redirect target for NeedsRedirect outcomes.

    Returns:
        The ResponseDecision to transmit.

    Raises:
        ValueError: NeedsRedirect without a redirect target.
    """
    if isinstance(outcome, FileError):
        return IoError(outcome.kind)

    if isinstance(outcome, File):
        is_index = isinstance(outcome, Index)
        if negotiation is None:
            return Ok(outcome.path, outcome.metadata, is_index=is_index)
        if negotiation.not_modified:
            return NotModified(negotiation.headers)
        return Ok(outcome.path, outcome.metadata, negotiation.headers, is_index=is_index)

    if isinstance(outcome, NeedsRedirect):
        if redirect is None:
            raise ValueError("NeedsRedirect outcome requires a redirect target")
        return RedirectTo(redirect)

    return NotFound()
