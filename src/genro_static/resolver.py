# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Path resolution - URL path segments to a file under the serving root.

Resolution steps::

    "/docs/has%20space.html"
        -> split_path()  ["docs", "has space.html"]     (decode per segment)
        -> normalize()   ["docs", "has space.html"]     ("." dropped, ".." clamped at root)
        -> root / "docs" / "has space.html"
        -> resolve()     real path, must stay under the real root
        -> stat()        File | Index | NeedsRedirect | Missing

Outcomes:
    File(path, metadata): a regular file.
    Index(path, metadata): the index.html of a directory requested with a
        trailing slash.
    NeedsRedirect(directory): a directory holding an index.html requested
        without the trailing slash.
    Missing(): nothing servable.

Missing entries (ENOENT, ENOTDIR, ELOOP, ENAMETOOLONG) are Missing. Any other
OSError while reading metadata is raised as FileError so the caller can
report it instead of pretending the file does not exist.
"""

from __future__ import annotations

import errno
import os
import stat
from collections.abc import Sequence
from pathlib import Path, PurePath
from urllib.parse import unquote

from .exceptions import FileError

__all__ = [
    "INDEX_FILE",
    "File",
    "FileMetadata",
    "Index",
    "Missing",
    "NeedsRedirect",
    "ResolutionOutcome",
    "has_trailing_slash",
    "normalize",
    "resolve",
    "split_path",
]

INDEX_FILE = "index.html"

_MISSING_ERRNOS = frozenset({errno.ENOENT, errno.ENOTDIR, errno.ELOOP, errno.ENAMETOOLONG})


class FileMetadata:
    """Filesystem view of a resolved path, read once per request.

    Attributes:
        is_file: True for a regular file.
        is_dir: True for a directory.
        size: Size in bytes.
        mtime: Modification time as a float timestamp.
    """

    __slots__ = ("is_file", "is_dir", "size", "mtime")

    def __init__(self, is_file: bool, is_dir: bool, size: int, mtime: float) -> None:
        self.is_file = is_file
        self.is_dir = is_dir
        self.size = size
        self.mtime = mtime

    @classmethod
    def from_stat(cls, st: os.stat_result) -> FileMetadata:
        return cls(
            is_file=stat.S_ISREG(st.st_mode),
            is_dir=stat.S_ISDIR(st.st_mode),
            size=st.st_size,
            mtime=st.st_mtime,
        )

    @property
    def last_modified(self) -> int:
        """Modification time truncated to whole seconds."""
        return int(self.mtime)

    def __repr__(self) -> str:
        kind = "file" if self.is_file else "dir" if self.is_dir else "other"
        return f"FileMetadata({kind}, size={self.size}, mtime={self.mtime})"


class ResolutionOutcome:
    """Base class for resolver outcomes."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return False
        return all(getattr(self, name) == getattr(other, name) for name in self._fields())

    def __hash__(self) -> int:
        return hash((type(self), *(getattr(self, name) for name in self._fields())))

    def _fields(self) -> tuple[str, ...]:
        return ()


class File(ResolutionOutcome):
    """A regular file to serve."""

    __slots__ = ("path", "metadata")

    def __init__(self, path: Path, metadata: FileMetadata) -> None:
        self.path = path
        self.metadata = metadata

    def _fields(self) -> tuple[str, ...]:
        return ("path",)

    def __repr__(self) -> str:
        return f"File({str(self.path)!r})"


class Index(File):
    """The index file of a directory requested with a trailing slash."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Index({str(self.path)!r})"


class NeedsRedirect(ResolutionOutcome):
    """A directory with an index requested without its trailing slash."""

    __slots__ = ("directory",)

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _fields(self) -> tuple[str, ...]:
        return ("directory",)

    def __repr__(self) -> str:
        return f"NeedsRedirect({str(self.directory)!r})"


class Missing(ResolutionOutcome):
    """Nothing servable at the requested path."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "Missing()"


def split_path(path: str) -> list[str]:
    """Split a still percent-encoded URL path into decoded segments.

    Decoding happens after the split, so an encoded "%2F" stays inside its
    segment instead of becoming a separator. A trailing slash yields a final
    empty segment, as URL path serialization does. An empty path gives an
    empty list.

    Example:
        >>> split_path("/a%20b/c/")
        ['a b', 'c', '']
    """
    if not path:
        return []
    if path.startswith("/"):
        path = path[1:]
    return [unquote(segment) for segment in path.split("/")]


def has_trailing_slash(segments: Sequence[str]) -> bool:
    """True if the URL the segments came from ended with "/".

    "/" splits to [""]. The empty list comes from an empty path, which a
    mount produces for a request naming exactly its prefix ("/static" on a
    "/static" mount); it has no trailing slash.
    """
    return bool(segments) and segments[-1] == ""


def normalize(segments: Sequence[str]) -> list[str] | None:
    """Collapse "." and ".." segments; ".." never climbs above the root.

    Returns None when a segment cannot be a single path component (it holds
    a separator, a NUL byte or a drive/anchor).
    """
    parts: list[str] = []
    for segment in segments:
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts:
                parts.pop()
            continue
        if not _is_component(segment):
            return None
        parts.append(segment)
    return parts


def _is_component(segment: str) -> bool:
    if "/" in segment or "\x00" in segment:
        return False
    if os.sep in segment or (os.altsep and os.altsep in segment):
        return False
    return not PurePath(segment).anchor


def _stat(path: Path) -> FileMetadata | None:
    try:
        return FileMetadata.from_stat(path.stat())
    except OSError as e:
        if e.errno in _MISSING_ERRNOS:
            return None
        raise FileError.from_os_error(e) from e


def _contained(root: Path, candidate: Path) -> Path | None:
    """Return the real path of candidate if it lies under root, else None."""
    try:
        real = candidate.resolve()
    except (OSError, RuntimeError, ValueError):
        return None
    try:
        real.relative_to(root)
    except ValueError:
        return None
    return real


def resolve(root: str | Path, segments: Sequence[str]) -> ResolutionOutcome:
    """Resolve decoded URL path segments against a serving root.

    Args:
        root: Serving root directory. Resolved to its real path first.
        segments: Percent-decoded URL path segments, see split_path().

    Returns:
        File, Index, NeedsRedirect or Missing.

    Raises:
        FileError: Metadata could not be read for a reason other than the
            entry being absent (e.g. permission denied).
    """
    real_root = Path(root).resolve()
    parts = normalize(segments)
    if parts is None:
        return Missing()

    target = _contained(real_root, real_root.joinpath(*parts))
    if target is None:
        return Missing()

    metadata = _stat(target)
    if metadata is None:
        return Missing()
    if metadata.is_file:
        # "file.html/" names a directory, as it would for the filesystem
        if parts and has_trailing_slash(segments):
            return Missing()
        return File(target, metadata)
    if not metadata.is_dir:
        return Missing()

    index_path = _contained(real_root, target / INDEX_FILE)
    if index_path is None:
        return Missing()
    index_metadata = _stat(index_path)
    if index_metadata is None or not index_metadata.is_file:
        return Missing()

    # Relative links inside the index only work when the URL ends with "/"
    if not has_trailing_slash(segments):
        return NeedsRedirect(target)
    return Index(index_path, index_metadata)
