# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for directory redirects."""

from genro_static.redirect import REDIRECT_STATUS, RedirectTarget, build_redirect


class TestBuildRedirect:
    """Tests for build_redirect()."""

    def test_appends_slash(self) -> None:
        target = build_redirect("http://localhost:3000/dir")
        assert target.location == "http://localhost:3000/dir/"

    def test_relative_url(self) -> None:
        assert build_redirect("/docs").location == "/docs/"

    def test_body_and_status(self) -> None:
        target = build_redirect("http://localhost:3000/dir")
        assert target.body == "Redirecting to http://localhost:3000/dir/"
        assert target.status_code == REDIRECT_STATUS == 301

    def test_original_url_wins(self) -> None:
        target = build_redirect(
            "http://localhost:3000/dir",
            original_url="http://localhost:3000/static/dir",
        )
        assert target.location == "http://localhost:3000/static/dir/"

    def test_query_kept_after_slash(self) -> None:
        target = build_redirect("http://host/dir?lang=it")
        assert target.location == "http://host/dir/?lang=it"

    def test_encoded_path_preserved(self) -> None:
        target = build_redirect("http://host/has%20space")
        assert target.location == "http://host/has%20space/"

    def test_mount_root(self) -> None:
        target = build_redirect("http://host", original_url="http://host/static")
        assert target.location == "http://host/static/"

    def test_equality(self) -> None:
        assert build_redirect("/a") == RedirectTarget("/a/")
        assert build_redirect("/a") != RedirectTarget("/b/")
