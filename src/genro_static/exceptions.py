# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exception classes for genro-static error handling.

Module Structure
----------------
HTTPException is the root of the family. Handlers and middleware raise it
to signal an HTTP error response; ErrorMiddleware catches it and sends a
plain-text response.

1. HTTPException - HTTP error response (4xx, 5xx)
2. FileError - a filesystem failure while resolving or serving a file

FileError
---------
Wraps the OSError raised by the filesystem and classifies it into a
FileErrorKind. The kind drives the HTTP status:

    NOT_FOUND          -> 404  "File not found"
    PERMISSION_DENIED  -> 403  "Forbidden"
    OTHER              -> 500  "Internal Server Error"

The detail never contains the filesystem path, so it is safe to send to
clients as-is.

Example:
    >>> try:
    ...     os.stat(path)
    ... except OSError as e:
    ...     raise FileError.from_os_error(e) from e
"""

from __future__ import annotations

import errno
from enum import Enum

__all__ = [
    "FileError",
    "FileErrorKind",
    "HTTPException",
]


class HTTPException(Exception):
    """An HTTP error response raised as an exception.

    Attributes:
        status_code: Response status.
        detail: Plain-text body, also the exception message.
        headers: Extra response headers as (name, value) pairs, or None.
            A dict argument is turned into pairs so repeated names stay
            possible.

    Example:
        >>> raise HTTPException(405, "Method Not Allowed", {"Allow": "GET, HEAD"})
    """

    def __init__(
        self,
        status_code: int,
        detail: str = "",
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
    ) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.headers: list[tuple[str, str]] | None = _header_pairs(headers)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, detail={self.detail!r})"


def _header_pairs(
    headers: dict[str, str] | list[tuple[str, str]] | None,
) -> list[tuple[str, str]] | None:
    if headers is None:
        return None
    if isinstance(headers, dict):
        return list(headers.items())
    return list(headers)


class FileErrorKind(Enum):
    """Classification of a filesystem failure."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"

    @property
    def status_code(self) -> int:
        return _KIND_STATUS[self]

    @property
    def detail(self) -> str:
        return _KIND_DETAIL[self]


_KIND_STATUS = {
    FileErrorKind.NOT_FOUND: 404,
    FileErrorKind.PERMISSION_DENIED: 403,
    FileErrorKind.OTHER: 500,
}

_KIND_DETAIL = {
    FileErrorKind.NOT_FOUND: "File not found",
    FileErrorKind.PERMISSION_DENIED: "Forbidden",
    FileErrorKind.OTHER: "Internal Server Error",
}


class FileError(HTTPException):
    """
    Filesystem error raised while resolving or serving a static file.

    Attributes:
        kind: FileErrorKind derived from the OSError.
        error: The originating OSError, if any.
    """

    def __init__(self, kind: FileErrorKind, error: OSError | None = None) -> None:
        super().__init__(kind.status_code, detail=kind.detail)
        self.kind = kind
        self.error = error

    @classmethod
    def from_os_error(cls, error: OSError) -> FileError:
        """Classify an OSError by errno."""
        if error.errno in (errno.ENOENT, errno.ENOTDIR):
            kind = FileErrorKind.NOT_FOUND
        elif error.errno in (errno.EACCES, errno.EPERM):
            kind = FileErrorKind.PERMISSION_DENIED
        else:
            kind = FileErrorKind.OTHER
        return cls(kind, error)

    def __repr__(self) -> str:
        return f"FileError(kind={self.kind.name}, error={self.error!r})"
