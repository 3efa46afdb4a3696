# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Error middleware - turns exceptions escaping the app into plain-text responses.

    HTTPException  -> its status, detail as body, its extra headers
                      (FileError: 403 Forbidden / 404 File not found / 500)
    anything else  -> 500 Internal Server Error, logged with traceback

Nothing can be sent once ``http.response.start`` went out, so an exception
raised mid-stream (a read failure while a file body is being sent) is
re-raised for the server to drop the connection.

Config:
    debug (bool): Append the traceback to 500 bodies. Default: False.
"""

from __future__ import annotations

import logging
import traceback
from typing import TYPE_CHECKING, Any, MutableMapping

from . import BaseMiddleware
from ..exceptions import HTTPException

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger("genro_static")


async def send_plain(
    send: Send,
    status: int,
    text: str,
    headers: list[tuple[str, str]] | None = None,
) -> None:
    """Send a complete text/plain response."""
    body = text.encode("utf-8")
    raw_headers = [
        (b"content-type", b"text/plain; charset=utf-8"),
        (b"content-length", str(len(body)).encode()),
    ]
    raw_headers.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers or []
    )
    await send({"type": "http.response.start", "status": status, "headers": raw_headers})
    await send({"type": "http.response.body", "body": body})


class ErrorMiddleware(BaseMiddleware):
    """Outermost middleware: no exception reaches the server before a response starts.

    Attributes:
        debug: Include the traceback in 500 bodies.
    """

    middleware_name = "errors"
    middleware_order = 100
    middleware_default = True

    __slots__ = ("debug",)

    def __init__(self, app: ASGIApp, debug: bool = False, **kwargs: Any) -> None:
        super().__init__(app, **kwargs)
        self.debug = debug

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def tracking_send(message: MutableMapping[str, Any]) -> None:
            nonlocal started
            started = started or message["type"] == "http.response.start"
            await send(message)

        try:
            await self.app(scope, receive, tracking_send)
        except HTTPException as e:
            if started:
                raise
            await send_plain(send, e.status_code, e.detail or "", e.headers)
        except Exception as e:
            logger.exception(f"Unhandled error on {scope.get('path', '/')}: {e}")
            if started:
                raise
            text = "Internal Server Error"
            if self.debug:
                text = f"{text}\n\n{traceback.format_exc()}"
            await send_plain(send, 500, text)
