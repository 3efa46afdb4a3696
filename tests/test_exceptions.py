# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for genro_static exceptions."""

import errno

import pytest

from genro_static.exceptions import (
    FileError,
    FileErrorKind,
    HTTPException,
)


class TestHTTPException:
    """Tests for HTTPException."""

    def test_basic(self) -> None:
        exc = HTTPException(404, detail="Not here")
        assert exc.status_code == 404
        assert exc.detail == "Not here"
        assert exc.headers is None
        assert str(exc) == "Not here"

    def test_dict_headers_become_list(self) -> None:
        exc = HTTPException(405, headers={"Allow": "GET, HEAD"})
        assert exc.headers == [("Allow", "GET, HEAD")]

    def test_list_headers_keep_duplicates(self) -> None:
        exc = HTTPException(400, headers=[("X-A", "1"), ("X-A", "2")])
        assert exc.headers == [("X-A", "1"), ("X-A", "2")]

    def test_repr_names_subclass(self) -> None:
        assert repr(FileError(FileErrorKind.OTHER)).startswith("FileError(")
        assert repr(HTTPException(404, "x")) == "HTTPException(status_code=404, detail='x')"


class TestFileError:
    """Tests for FileError classification."""

    @pytest.mark.parametrize(
        "code,kind",
        [
            (errno.ENOENT, FileErrorKind.NOT_FOUND),
            (errno.ENOTDIR, FileErrorKind.NOT_FOUND),
            (errno.EACCES, FileErrorKind.PERMISSION_DENIED),
            (errno.EPERM, FileErrorKind.PERMISSION_DENIED),
            (errno.EIO, FileErrorKind.OTHER),
        ],
    )
    def test_from_os_error(self, code: int, kind: FileErrorKind) -> None:
        original = OSError(code, "boom")
        error = FileError.from_os_error(original)
        assert error.kind is kind
        assert error.error is original
        assert error.status_code == kind.status_code

    def test_detail_hides_path(self) -> None:
        error = FileError.from_os_error(PermissionError(errno.EACCES, "denied", "/srv/secret"))
        assert error.detail == "Forbidden"
        assert "/srv" not in error.detail

    def test_is_http_exception(self) -> None:
        assert isinstance(FileError(FileErrorKind.OTHER), HTTPException)
        assert FileError(FileErrorKind.OTHER).status_code == 500
