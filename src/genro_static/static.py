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
StaticFiles - the ASGI face of StaticHandler.

Per HTTP request::

    scope -> StaticRequest.from_scope()      (raw_path, root_path, Host, IMS)
          -> StaticHandler.handle()          (in a worker thread)
          -> None                            405, Allow: GET, HEAD
          -> Ok                              headers, then the file in chunks
          -> RedirectTo / NotModified /
             NotFound / IoError               headers and the plain-text body

HEAD gets the same headers as GET and an empty body; for Ok the file is not
even opened. A file that vanishes or becomes unreadable between resolution
and open is answered with the matching IoError (404/403/500). Once the
first body chunk is out, read errors propagate to the server.

Resolution, open and read are blocking calls wrapped with smartasync, which
runs them in a thread when awaited from the event loop.

Standalone::

    python -m genro_static.static ./public --port 8000 --cache 86400
"""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path
from typing import IO

from smartasync import smartasync

from .cache import CachePolicy
from .decision import IoError, Ok, ResponseDecision
from .exceptions import FileError
from .handler import RequestHandler, StaticHandler, StaticRequest
from .types import Receive, Scope, Send

__all__ = ["StaticFiles"]

DEFAULT_CHUNK_SIZE = 64 * 1024

logger = logging.getLogger("genro_static")


@smartasync
def _decide(handler: RequestHandler, request: StaticRequest) -> ResponseDecision | None:
    return handler.handle(request)


@smartasync
def _open_file(path: Path) -> IO[bytes]:
    return open(path, "rb")


@smartasync
def _read_chunk(fh: IO[bytes], size: int) -> bytes:
    return fh.read(size)


def _encode_headers(headers: list[tuple[str, str]]) -> list[tuple[bytes, bytes]]:
    return [(name.encode("latin-1"), value.encode("latin-1")) for name, value in headers]


class StaticFiles:
    """
    ASGI application serving one directory (or one file).

    Example:
        # Basic usage
        app = StaticFiles(directory="./public")

        # Conditional GET with 30 days max-age
        app = StaticFiles(directory="./public", cache=timedelta(days=30))

        # Run
        uvicorn.run(app)
    """

    __slots__ = ("directory", "handler", "chunk_size")

    def __init__(
        self,
        directory: str | Path,
        cache: int | float | timedelta | CachePolicy | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        handler: RequestHandler | None = None,
    ) -> None:
        """
        Args:
            directory: Root to serve files from. May also be a single file.
            cache: Advertised max-age. None or 0 disables conditional GET.
            chunk_size: Bytes read per body message.
            handler: Custom RequestHandler. Defaults to a StaticHandler on
                directory.

        Raises:
            ValueError: If directory does not exist.
        """
        self.directory = Path(directory).resolve()
        if not self.directory.exists():
            raise ValueError(f"Directory does not exist: {self.directory}")
        if handler is None:
            handler = StaticHandler(self.directory)
            if cache:
                handler = handler.with_cache(cache)
        self.handler = handler
        self.chunk_size = chunk_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Answer one HTTP request; other scope types are ignored."""
        if scope["type"] != "http":
            return

        request = StaticRequest.from_scope(scope)
        decision = await self.decide(request)
        if decision is None:
            await self._send_error(send, 405, "Method Not Allowed", [("allow", "GET, HEAD")])
            return

        await self.send_decision(send, decision, include_body=(request.method != "HEAD"))

    async def decide(self, request: StaticRequest) -> ResponseDecision | None:
        """Run the handler off the event loop."""
        return await _decide(self.handler, request)

    async def send_decision(
        self,
        send: Send,
        decision: ResponseDecision,
        include_body: bool = True,
    ) -> None:
        """
        Transmit a response decision.

        Args:
            send: ASGI send callable.
            decision: Decision returned by the handler.
            include_body: False for HEAD requests.
        """
        if isinstance(decision, Ok):
            await self._send_file(send, decision, include_body)
            return

        body = decision.body
        await send({
            "type": "http.response.start",
            "status": decision.status_code,
            "headers": _encode_headers(decision.headers),
        })
        await send({
            "type": "http.response.body",
            "body": body.encode("utf-8") if (body and include_body) else b"",
        })

    async def _send_file(self, send: Send, decision: Ok, include_body: bool) -> None:
        """
        Stream the file of an Ok decision.

        The file is opened only when a body is sent. A failure to open it
        (removed or made unreadable after resolution) becomes an IoError
        response. Read failures after the response has started propagate.
        """
        if not include_body:
            await send({
                "type": "http.response.start",
                "status": decision.status_code,
                "headers": _encode_headers(decision.headers),
            })
            await send({"type": "http.response.body", "body": b""})
            return

        try:
            fh = await _open_file(decision.path)
        except OSError as e:
            error = FileError.from_os_error(e)
            logger.warning(f"Cannot open {decision.path}: {e}")
            await self.send_decision(send, IoError(error.kind))
            return

        try:
            await send({
                "type": "http.response.start",
                "status": decision.status_code,
                "headers": _encode_headers(decision.headers),
            })
            while True:
                chunk = await _read_chunk(fh, self.chunk_size)
                more_body = len(chunk) == self.chunk_size
                await send({
                    "type": "http.response.body",
                    "body": chunk,
                    "more_body": more_body,
                })
                if not more_body:
                    break
        finally:
            fh.close()

    async def _send_error(
        self,
        send: Send,
        status: int,
        message: str,
        extra_headers: list[tuple[str, str]] | None = None,
    ) -> None:
        """Plain-text response for conditions outside the handler (405)."""
        body = message.encode()
        headers = [
            ("content-type", "text/plain; charset=utf-8"),
            ("content-length", str(len(body))),
            *(extra_headers or []),
        ]

        await send({
            "type": "http.response.start",
            "status": status,
            "headers": _encode_headers(headers),
        })

        await send({
            "type": "http.response.body",
            "body": body,
        })

    def __repr__(self) -> str:
        """Return string representation."""
        return f"StaticFiles(directory={self.directory!r}, handler={self.handler!r})"


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Serve static files")
    parser.add_argument("directory", help="Directory to serve")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument("--cache", type=int, default=0, help="max-age in seconds (default: off)")
    args = parser.parse_args()

    app = StaticFiles(directory=args.directory, cache=args.cache)

    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=args.port)
