# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Server configuration - merges defaults, YAML files, env and argv."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from genro_toolbox import SmartOptions  # type: ignore[import-untyped]

__all__ = ["ServerConfig", "DEFAULTS", "CONFIG_FILENAME"]

DEFAULTS = {
    "host": "127.0.0.1",
    "port": 8000,
    "prefix": "",
    "cache": 0,
    "log_level": "INFO",
}

CONFIG_FILENAME = "genro-static.yaml"


def _server_opts_spec(
    directory: str,
    host: str = "127.0.0.1",
    port: int = 8000,
    prefix: str = "",
    cache: int = 0,
    log_level: str = "INFO",
) -> None:
    """Reference function for SmartOptions type extraction."""


class ServerConfig:
    """Handles static server configuration loading.

    Config precedence (later overrides earlier):
    1. Built-in DEFAULTS
    2. Global config: ~/.genro-static/config.yaml
    3. Project config: ./genro-static.yaml
    4. Environment variables: GENRO_STATIC_*
    5. Command line arguments
    6. Explicit constructor parameters

    Example config file::

        server:
          directory: ./public
          port: 8080
          cache: 2592000

        middleware:
          logging: on
    """

    __slots__ = ("_opts",)

    def __init__(
        self,
        directory: str | Path | None = None,
        host: str | None = None,
        port: int | None = None,
        prefix: str | None = None,
        cache: int | None = None,
        argv: list[str] | None = None,
        config_dir: str | Path | None = None,
    ) -> None:
        self._opts = self._build_config(
            caller=dict(
                directory=str(directory) if directory is not None else None,
                host=host,
                port=port,
                prefix=prefix,
                cache=cache,
            ),
            argv=argv or [],
            config_dir=Path(config_dir) if config_dir is not None else Path.cwd(),
        )

    def _build_config(
        self,
        caller: dict[str, Any],
        argv: list[str],
        config_dir: Path,
    ) -> SmartOptions:
        env_argv_opts = SmartOptions(_server_opts_spec, env="GENRO_STATIC", argv=argv)
        caller_opts = SmartOptions(caller, ignore_none=True)

        global_config_path = Path.home() / ".genro-static" / "config.yaml"
        if global_config_path.exists():
            global_config = SmartOptions(str(global_config_path))
        else:
            global_config = SmartOptions({})

        project_config_path = config_dir / CONFIG_FILENAME
        if project_config_path.exists():
            project_config = SmartOptions(str(project_config_path))
        else:
            project_config = SmartOptions({})

        config = global_config + project_config

        server_opts = (
            SmartOptions(DEFAULTS)
            + (global_config["server"] or SmartOptions({}))
            + (project_config["server"] or SmartOptions({}))
            + env_argv_opts
            + caller_opts
        )
        server_opts["directory"] = Path(server_opts["directory"] or ".").resolve()

        config["server"] = server_opts
        return config

    @property
    def server(self) -> SmartOptions:
        """Server options (directory, host, port, prefix, cache, log_level)."""
        result: SmartOptions = self._opts["server"]
        return result

    @property
    def directory(self) -> Path:
        """Directory to serve, resolved."""
        result: Path = self.server["directory"]
        return result

    @property
    def cache(self) -> int:
        """Advertised max-age in seconds, 0 when caching is off."""
        return int(self.server["cache"] or 0)

    @property
    def prefix(self) -> str:
        """Mount prefix, "" to serve at the root."""
        return str(self.server["prefix"] or "").rstrip("/")

    @property
    def middleware(self) -> Any:
        """Middleware configuration ({name: on/off})."""
        return self._opts["middleware"] or []

    def __getitem__(self, name: str) -> Any:
        """Proxy bracket access to underlying opts."""
        return self._opts[name]


if __name__ == "__main__":
    config = ServerConfig()
    print(f"Serving: {config.directory}")
    print(f"Server: {config.server['host']}:{config.server['port']}")
    print(f"Middleware: {config.middleware}")
