# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
genro-static CLI entry point.

Usage:
    genro-static serve ./public                  # Serve a directory
    genro-static serve ./public --port 9000      # Override port
    genro-static serve ./public --cache 86400    # Conditional GET, 1 day max-age
    genro-static serve ./docs --prefix /docs     # Mount under /docs
"""

from __future__ import annotations

import logging
import sys


def cmd_serve(argv: list[str]) -> int:
    """Run the static file server."""
    from .server import StaticServer

    # Create server - passes argv for SmartOptions parsing
    try:
        server = StaticServer(argv=argv)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=str(server.config.server["log_level"] or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    directory = server.config.directory
    print("genro-static starting...", flush=True)
    print(f"Directory: {directory}", flush=True)
    print(
        f"Server: http://{server.config.server['host']}:{server.config.server['port']}"
        f"{server.config.prefix}/",
        flush=True,
    )
    if server.config.cache:
        print(f"Cache: max-age={server.config.cache}", flush=True)
    print(flush=True)

    try:
        server.run()
    except KeyboardInterrupt:
        print("\nShutdown.")

    return 0


def main() -> int:
    """Main entry point."""
    if "--version" in sys.argv or "-v" in sys.argv:
        from . import __version__

        print(f"genro-static {__version__}")
        return 0

    if "--help" in sys.argv or "-h" in sys.argv or len(sys.argv) == 1:
        print("Usage: genro-static serve <directory> [options]")
        print()
        print("Arguments:")
        print("  directory         Directory (or single file) to serve")
        print()
        print("Options:")
        print("  --host HOST       Server host (default: 127.0.0.1)")
        print("  --port PORT       Server port (default: 8000)")
        print("  --prefix PREFIX   Mount prefix (default: none)")
        print("  --cache SECONDS   Enable conditional GET with this max-age")
        print("  --log_level LEVEL Log level (default: INFO)")
        print("  --version, -v     Show version")
        print("  --help, -h        Show this help")
        return 0

    subcommand = sys.argv[1]
    if subcommand != "serve":
        print(f"Error: unknown subcommand '{subcommand}'", file=sys.stderr)
        return 1

    return cmd_serve(sys.argv[2:])


if __name__ == "__main__":
    sys.exit(main())
