# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for StaticHandler and StaticRequest."""

import errno
import logging
import os
from datetime import timedelta
from pathlib import Path

import pytest

from genro_static.cache import CachePolicy, format_http_date
from genro_static.decision import IoError, NotFound, NotModified, Ok, RedirectTo
from genro_static.handler import RequestHandler, StaticHandler, StaticRequest, full_path

MTIME = 1_600_000_000


@pytest.fixture
def root(tmp_path: Path) -> Path:
    site = tmp_path / "site"
    site.mkdir()
    (site / "file1.html").write_text("this is file1")
    (site / "has space.html").write_text("spaced")
    (site / "dir").mkdir()
    (site / "dir" / "index.html").write_text("this is index")
    (site / "empty").mkdir()
    (tmp_path / "file1.html").write_text("outside")
    for path in site.rglob("*.html"):
        os.utime(path, (MTIME, MTIME))
    return site


def get(path: str, **kwargs: str | None) -> StaticRequest:
    kwargs.setdefault("url", f"http://localhost:3000{path}")
    return StaticRequest.from_path(path, **kwargs)


class TestStaticRequest:
    """Tests for StaticRequest construction."""

    def test_from_path(self) -> None:
        request = StaticRequest.from_path("/a%20b/c/")
        assert request.segments == ["a b", "c", ""]
        assert request.method == "GET"
        assert request.url == "/a%20b/c/"
        assert request.original_url is None

    def test_method_uppercased(self) -> None:
        assert StaticRequest([""], method="head").method == "HEAD"

    def test_from_scope(self) -> None:
        scope = {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("localhost", 3000),
            "path": "/has space.html",
            "raw_path": b"/has%20space.html",
            "query_string": b"v=1",
            "root_path": "",
            "headers": [(b"If-Modified-Since", b"Sun, 13 Sep 2020 12:26:40 GMT")],
        }
        request = StaticRequest.from_scope(scope)
        assert request.segments == ["has space.html"]
        assert request.url == "http://localhost:3000/has%20space.html?v=1"
        assert request.original_url is None
        assert request.if_modified_since == "Sun, 13 Sep 2020 12:26:40 GMT"

    def test_from_scope_keeps_encoded_slash(self) -> None:
        scope = {
            "type": "http",
            "path": "/a/b",
            "raw_path": b"/a%2Fb",
            "headers": [],
        }
        assert StaticRequest.from_scope(scope).segments == ["a/b"]

    def test_from_scope_without_raw_path(self) -> None:
        scope = {"type": "http", "path": "/has space.html", "headers": []}
        assert StaticRequest.from_scope(scope).segments == ["has space.html"]

    def test_from_scope_host_header(self) -> None:
        scope = {
            "type": "http",
            "path": "/dir",
            "server": ("10.0.0.1", 8000),
            "headers": [(b"host", b"example.com")],
        }
        assert StaticRequest.from_scope(scope).url == "http://example.com/dir"

    def test_from_scope_default_port_omitted(self) -> None:
        scope = {
            "type": "http",
            "scheme": "https",
            "path": "/dir",
            "server": ("example.com", 443),
            "headers": [],
        }
        assert StaticRequest.from_scope(scope).url == "https://example.com/dir"

    def test_from_scope_root_path_sets_original_url(self) -> None:
        scope = {
            "type": "http",
            "path": "/dir",
            "raw_path": b"/dir",
            "root_path": "/static",
            "server": ("localhost", 3000),
            "headers": [],
        }
        request = StaticRequest.from_scope(scope)
        assert request.url == "http://localhost:3000/dir"
        assert request.original_url == "http://localhost:3000/static/dir"

    def test_from_scope_root_path_inside_path(self) -> None:
        scope = {
            "type": "http",
            "path": "/app/dir",
            "raw_path": b"/app/dir",
            "root_path": "/app",
            "server": ("localhost", 3000),
            "headers": [],
        }
        request = StaticRequest.from_scope(scope)
        assert request.segments == ["dir"]
        assert request.url == "http://localhost:3000/dir"
        assert request.original_url == "http://localhost:3000/app/dir"

    def test_from_scope_root_path_keeps_encoding(self) -> None:
        scope = {
            "type": "http",
            "path": "/my app/has space.html",
            "raw_path": b"/my%20app/has%20space.html",
            "root_path": "/my app",
            "server": ("localhost", 3000),
            "headers": [],
        }
        request = StaticRequest.from_scope(scope)
        assert request.segments == ["has space.html"]
        assert request.original_url == "http://localhost:3000/my%20app/has%20space.html"

    def test_from_scope_path_equal_to_root_path(self) -> None:
        scope = {"type": "http", "path": "/app", "root_path": "/app", "headers": []}
        assert StaticRequest.from_scope(scope).segments == []

    def test_full_path(self) -> None:
        assert full_path({"path": "/app/x", "root_path": "/app"}) == "/app/x"
        assert full_path({"path": "/x", "root_path": "/app"}) == "/app/x"
        assert full_path({"path": "/x", "root_path": ""}) == "/x"


class TestStaticHandler:
    """Request scenarios against a StaticHandler."""

    def test_is_request_handler(self, root: Path) -> None:
        assert isinstance(StaticHandler(root), RequestHandler)

    def test_serves_file(self, root: Path) -> None:
        decision = StaticHandler(root).handle(get("/file1.html"))
        assert isinstance(decision, Ok)
        assert decision.path.read_text() == "this is file1"
        assert decision.cache is None
        assert dict(decision.headers)["content-length"] == "13"

    def test_serves_index_with_slash(self, root: Path) -> None:
        decision = StaticHandler(root).handle(get("/dir/"))
        assert isinstance(decision, Ok)
        assert decision.is_index
        assert decision.path.read_text() == "this is index"

    def test_redirects_directory(self, root: Path) -> None:
        decision = StaticHandler(root).handle(get("/dir"))
        assert isinstance(decision, RedirectTo)
        assert decision.status_code == 301
        assert decision.location == "http://localhost:3000/dir/"

    def test_redirect_uses_original_url(self, root: Path) -> None:
        request = get("/dir", original_url="http://localhost:3000/static/dir")
        decision = StaticHandler(root).handle(request)
        assert isinstance(decision, RedirectTo)
        assert decision.location == "http://localhost:3000/static/dir/"

    def test_directory_without_index(self, root: Path) -> None:
        assert isinstance(StaticHandler(root).handle(get("/empty/")), NotFound)

    def test_missing(self, root: Path) -> None:
        decision = StaticHandler(root).handle(get("/nope.html"))
        assert isinstance(decision, NotFound)
        assert decision.status_code == 404

    def test_traversal_clamped(self, root: Path) -> None:
        decision = StaticHandler(root).handle(get("/../file1.html"))
        assert isinstance(decision, Ok)
        assert decision.path.read_text() == "this is file1"

    def test_dot_dot_inside_root(self, root: Path) -> None:
        decision = StaticHandler(root).handle(get("/xxx/../file1.html"))
        assert isinstance(decision, Ok)

    def test_encoded_space(self, root: Path) -> None:
        decision = StaticHandler(root).handle(get("/has%20space.html"))
        assert isinstance(decision, Ok)
        assert decision.path.name == "has space.html"

    def test_head_is_answered(self, root: Path) -> None:
        decision = StaticHandler(root).handle(get("/file1.html", method="HEAD"))
        assert isinstance(decision, Ok)

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "OPTIONS"])
    def test_other_methods_declined(self, root: Path, method: str) -> None:
        assert StaticHandler(root).handle(get("/file1.html", method=method)) is None

    def test_permission_error(self, root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        original_stat = Path.stat

        def fake_stat(self: Path, *args: object, **kwargs: object) -> os.stat_result:
            if self.name == "file1.html":
                raise PermissionError(errno.EACCES, "Permission denied")
            return original_stat(self, *args, **kwargs)  # type: ignore[arg-type]

        monkeypatch.setattr(Path, "stat", fake_stat)
        decision = StaticHandler(root).handle(get("/file1.html"))
        assert isinstance(decision, IoError)
        assert decision.status_code == 403

    def test_permission_error_logged(
        self, root: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        original_stat = Path.stat

        def fake_stat(self: Path, *args: object, **kwargs: object) -> os.stat_result:
            if self.name == "file1.html":
                raise PermissionError(errno.EACCES, "Permission denied")
            return original_stat(self, *args, **kwargs)  # type: ignore[arg-type]

        monkeypatch.setattr(Path, "stat", fake_stat)
        with caplog.at_level(logging.WARNING, logger="genro_static"):
            StaticHandler(root).handle(get("/file1.html"))
        assert "Cannot serve" in caplog.text


class TestCaching:
    """Conditional GET through with_cache()."""

    def test_with_cache_returns_new_handler(self, root: Path) -> None:
        plain = StaticHandler(root)
        cached = plain.with_cache(timedelta(days=30))
        assert plain.cache is None
        assert cached.cache == CachePolicy(2592000)
        assert cached.root == plain.root

    def test_cache_headers_on_ok(self, root: Path) -> None:
        handler = StaticHandler(root).with_cache(3600)
        decision = handler.handle(get("/file1.html"))
        assert isinstance(decision, Ok)
        headers = dict(decision.headers)
        assert headers["cache-control"] == "public, max-age=3600"
        assert headers["last-modified"] == format_http_date(MTIME)
        assert headers["etag"].startswith('W/"')

    def test_round_trip_not_modified(self, root: Path) -> None:
        handler = StaticHandler(root).with_cache(3600)
        first = handler.handle(get("/file1.html"))
        last_modified = dict(first.headers)["last-modified"]  # type: ignore[union-attr]
        second = handler.handle(get("/file1.html", if_modified_since=last_modified))
        assert isinstance(second, NotModified)
        assert second.status_code == 304

    def test_older_date_serves_file(self, root: Path) -> None:
        handler = StaticHandler(root).with_cache(3600)
        request = get("/file1.html", if_modified_since=format_http_date(MTIME - 3600))
        assert isinstance(handler.handle(request), Ok)

    def test_index_negotiated(self, root: Path) -> None:
        handler = StaticHandler(root).with_cache(60)
        request = get("/dir/", if_modified_since=format_http_date(MTIME))
        assert isinstance(handler.handle(request), NotModified)

    def test_no_cache_ignores_header(self, root: Path) -> None:
        request = get("/file1.html", if_modified_since=format_http_date(MTIME + 60))
        decision = StaticHandler(root).handle(request)
        assert isinstance(decision, Ok)
        assert "cache-control" not in dict(decision.headers)

    def test_redirect_not_negotiated(self, root: Path) -> None:
        handler = StaticHandler(root).with_cache(60)
        request = get("/dir", if_modified_since=format_http_date(MTIME + 60))
        assert isinstance(handler.handle(request), RedirectTo)

    def test_missing_has_no_cache_headers(self, root: Path) -> None:
        decision = StaticHandler(root).with_cache(60).handle(get("/nope.html"))
        assert isinstance(decision, NotFound)
        headers = dict(decision.headers)
        assert "last-modified" not in headers
        assert "cache-control" not in headers
        assert "etag" not in headers
