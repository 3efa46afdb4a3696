# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Cache negotiation - HTTP caching headers and conditional GET.

Adds cache-related headers to file responses:
- Cache-Control: "public, max-age=<seconds>" from the CachePolicy
- Last-Modified: file mtime truncated to whole seconds
- ETag: weak validator from mtime + size

Handles conditional requests:
- If-Modified-Since: Not Modified if the file mtime <= client's time

Negotiation only runs when a CachePolicy is attached to the handler.
Without one, files are served with no cache headers at all.

Example::

    policy = CachePolicy(timedelta(days=30))
    result = negotiate(metadata, "Sun, 06 Nov 1994 08:49:37 GMT", policy)
    if result.not_modified:
        ...  # 304, result.headers carries ETag and Cache-Control only
    else:
        ...  # 200, result.headers carries all three
"""

from __future__ import annotations

import hashlib
from datetime import timedelta, timezone
from email.utils import formatdate, parsedate_to_datetime

from .resolver import FileMetadata

__all__ = [
    "CacheHeaders",
    "CachePolicy",
    "Negotiation",
    "compute_etag",
    "format_http_date",
    "negotiate",
    "parse_http_date",
]


class CachePolicy:
    """How long served files are advertised as cacheable.

    Immutable once built and shared by every request of one handler.

    Args:
        duration: max-age as seconds or a timedelta. Sub-second parts are
            dropped.

    Raises:
        ValueError: If duration is negative.
    """

    __slots__ = ("_max_age",)

    def __init__(self, duration: int | float | timedelta) -> None:
        if isinstance(duration, timedelta):
            seconds = int(duration.total_seconds())
        else:
            seconds = int(duration)
        if seconds < 0:
            raise ValueError(f"Cache duration must not be negative: {duration!r}")
        self._max_age = seconds

    @property
    def max_age(self) -> int:
        """max-age in seconds."""
        return self._max_age

    @property
    def cache_control(self) -> str:
        """Cache-Control header value."""
        return f"public, max-age={self._max_age}"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CachePolicy):
            return self._max_age == other._max_age
        return False

    def __hash__(self) -> int:
        return hash(self._max_age)

    def __repr__(self) -> str:
        return f"CachePolicy(max_age={self._max_age})"


class CacheHeaders:
    """Cache header values for one response.

    last_modified is None on Not Modified responses.
    """

    __slots__ = ("cache_control", "last_modified", "etag")

    def __init__(self, cache_control: str, etag: str, last_modified: str | None = None) -> None:
        self.cache_control = cache_control
        self.etag = etag
        self.last_modified = last_modified

    def items(self) -> list[tuple[str, str]]:
        """Headers as (name, value) pairs, in emission order."""
        headers = [("cache-control", self.cache_control)]
        if self.last_modified is not None:
            headers.append(("last-modified", self.last_modified))
        headers.append(("etag", self.etag))
        return headers

    def __repr__(self) -> str:
        return (
            f"CacheHeaders(cache_control={self.cache_control!r}, "
            f"last_modified={self.last_modified!r}, etag={self.etag!r})"
        )


class Negotiation:
    """Result of negotiate(): either Not Modified or serve with headers."""

    __slots__ = ("not_modified", "headers")

    def __init__(self, not_modified: bool, headers: CacheHeaders) -> None:
        self.not_modified = not_modified
        self.headers = headers

    def __repr__(self) -> str:
        return f"Negotiation(not_modified={self.not_modified}, headers={self.headers!r})"


def format_http_date(timestamp: float) -> str:
    """Format a timestamp as an RFC 7231 HTTP date.

    Example:
        >>> format_http_date(784111777)
        'Sun, 06 Nov 1994 08:49:37 GMT'
    """
    return formatdate(timestamp, usegmt=True)


def parse_http_date(value: str) -> int | None:
    """Parse an HTTP date header into a whole-second timestamp.

    Returns None for anything that is not a valid date, so a malformed
    If-Modified-Since is treated as absent.
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (ValueError, TypeError, IndexError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        # "-0000" zone: RFC 5322 says UTC with unknown origin
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def compute_etag(metadata: FileMetadata) -> str:
    """Weak ETag from whole-second mtime and size.

    Uses MD5 of the "mtime-size" string. Fast but not cryptographic.
    """
    data = f"{metadata.last_modified}-{metadata.size}".encode()
    return f'W/"{hashlib.md5(data).hexdigest()}"'


def negotiate(
    metadata: FileMetadata,
    if_modified_since: str | None,
    policy: CachePolicy,
) -> Negotiation:
    """Decide between Not Modified and a full response with cache headers.

    Args:
        metadata: Metadata of the file about to be served.
        if_modified_since: Raw If-Modified-Since header value, if any.
        policy: The handler's cache policy.

    Returns:
        Negotiation. When not_modified is True the headers omit
        Last-Modified; otherwise they carry Cache-Control, Last-Modified and
        ETag.
    """
    last_modified = metadata.last_modified
    etag = compute_etag(metadata)

    if if_modified_since:
        client_time = parse_http_date(if_modified_since)
        if client_time is not None and last_modified <= client_time:
            return Negotiation(True, CacheHeaders(policy.cache_control, etag))

    headers = CacheHeaders(policy.cache_control, etag, format_http_date(last_modified))
    return Negotiation(False, headers)
