# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Redirect policy for directory URLs missing their trailing slash.

A request for ``/docs`` that names a directory with an index is answered
with ``301 Moved Permanently`` to ``/docs/``. When a mount rewrote the URL
before the handler saw it, the original URL is used so the client is sent
back under the mount prefix::

    original_url = "http://host/static/docs"    # as the client sent it
    url          = "http://host/docs"           # as the handler sees it
    location     = "http://host/static/docs/"

Query string and fragment are kept after the added slash.
"""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

__all__ = ["REDIRECT_STATUS", "RedirectTarget", "build_redirect"]

REDIRECT_STATUS = 301


class RedirectTarget:
    """Where to redirect, plus a plain-text body for clients that do not follow.

    Attributes:
        location: Value for the Location header.
        body: Human readable body, "Redirecting to <location>".
        status_code: Always 301.
    """

    __slots__ = ("location", "body", "status_code")

    def __init__(self, location: str) -> None:
        self.location = location
        self.body = f"Redirecting to {location}"
        self.status_code = REDIRECT_STATUS

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RedirectTarget):
            return self.location == other.location
        return False

    def __hash__(self) -> int:
        return hash(self.location)

    def __repr__(self) -> str:
        return f"RedirectTarget(location={self.location!r})"


def build_redirect(url: str, original_url: str | None = None) -> RedirectTarget:
    """Build the slash-terminated redirect target for a directory URL.

    Args:
        url: The URL as seen by the handler.
        original_url: The URL before any mount/rewrite, when known.

    Returns:
        RedirectTarget with exactly one "/" appended to the path.
    """
    parts = urlsplit(original_url or url)
    return RedirectTarget(urlunsplit(parts._replace(path=parts.path + "/")))
