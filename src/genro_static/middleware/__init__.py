# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Middleware wrapped around the static app by StaticServer.

Every BaseMiddleware subclass registers itself under ``middleware_name``
when its module is imported; all modules of this package are imported at
package load. The chain is assembled from the ``middleware`` config
section, ordered by ``middleware_order`` (outermost first)::

    errors (100, on) -> logging (200, off) -> static (600, off) -> app

Each middleware receives its ``<name>_middleware`` section as keyword
arguments.
"""

from __future__ import annotations

import importlib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send

MIDDLEWARE_REGISTRY: dict[str, type["BaseMiddleware"]] = {}

_TRUE_WORDS = frozenset({"on", "true", "yes", "1"})


class BaseMiddleware(ABC):
    """Base class for registered middleware.

    Class attributes:
        middleware_name: Config key. Defaults to the class name.
        middleware_order: Position in the chain, lower wraps outer.
        middleware_default: Whether the middleware is on without config.
    """

    middleware_name: str = ""
    middleware_order: int = 500
    middleware_default: bool = False

    __slots__ = ("app",)

    def __init__(self, app: ASGIApp, **kwargs: Any) -> None:
        self.app = app

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        name = cls.middleware_name or cls.__name__
        if name in MIDDLEWARE_REGISTRY:
            raise ValueError(f"Middleware name '{name}' already registered")
        cls.middleware_name = name
        MIDDLEWARE_REGISTRY[name] = cls

    @abstractmethod
    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None: ...


def _import_submodules() -> None:
    for module_path in sorted(Path(__file__).parent.glob("*.py")):
        if not module_path.name.startswith("_"):
            importlib.import_module(f".{module_path.stem}", __package__)


def _is_on(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_WORDS
    return bool(value)


def _switches(middleware_config: Any) -> dict[str, bool]:
    """Normalize the ``middleware`` section to {name: enabled}.

    Accepts a mapping (plain or SmartOptions) of on/off values, a
    comma-separated string or a list of names to switch on.
    """
    if not middleware_config:
        return {}
    if hasattr(middleware_config, "as_dict"):
        middleware_config = middleware_config.as_dict()
    if isinstance(middleware_config, dict):
        return {name: _is_on(value) for name, value in middleware_config.items()}
    if isinstance(middleware_config, str):
        middleware_config = middleware_config.split(",")
    return {name.strip(): True for name in middleware_config if name.strip()}


def _section(full_config: Any, name: str) -> dict[str, Any]:
    """Keyword arguments for one middleware from its ``<name>_middleware`` section."""
    if full_config is None:
        return {}
    key = f"{name}_middleware"
    section = full_config.get(key) if isinstance(full_config, dict) else full_config[key]
    if section is None:
        return {}
    if hasattr(section, "as_dict"):
        return dict(section.as_dict())
    return dict(section)


def middleware_chain(
    middleware_config: str | list[str] | dict[str, Any] | None,
    app: ASGIApp,
    full_config: Any = None,
) -> ASGIApp:
    """Wrap app with the enabled middleware.

    Args:
        middleware_config: The ``middleware`` section: {name: on/off}, a
            comma-separated string or a list of names.
        app: Innermost ASGI app.
        full_config: Whole configuration (dict or SmartOptions) holding the
            ``<name>_middleware`` sections.

    Returns:
        The outermost ASGI app.
    """
    switches = _switches(middleware_config)
    enabled = sorted(
        (cls for name, cls in MIDDLEWARE_REGISTRY.items()
         if switches.get(name, cls.middleware_default)),
        key=lambda cls: cls.middleware_order,
    )
    for cls in reversed(enabled):
        app = cls(app, **_section(full_config, cls.middleware_name))
    return app


_import_submodules()

# Export by class name; registry keys would shadow the submodules
globals().update({cls.__name__: cls for cls in MIDDLEWARE_REGISTRY.values()})

__all__ = [
    "BaseMiddleware",
    "MIDDLEWARE_REGISTRY",
    "middleware_chain",
    *(cls.__name__ for cls in MIDDLEWARE_REGISTRY.values()),
]
