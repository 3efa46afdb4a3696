# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for ASGI type aliases."""

from genro_static.types import ASGIApp, Message, Receive, Scope, Send


class TestTypeImports:
    """Test that all types are importable and correctly defined."""

    def test_all_exports(self) -> None:
        from genro_static import types

        assert set(types.__all__) == {"Scope", "Message", "Receive", "Send", "ASGIApp"}

    def test_types_importable_from_package(self) -> None:
        import genro_static

        assert genro_static.Scope is Scope
        assert genro_static.ASGIApp is ASGIApp
        assert Message is not None
        assert Receive is not None
        assert Send is not None

    def test_scope_accepts_mount_keys(self) -> None:
        scope: Scope = {"type": "http", "path": "/dir", "root_path": "/static"}
        scope["raw_path"] = b"/dir"
        assert scope["root_path"] + scope["path"] == "/static/dir"
