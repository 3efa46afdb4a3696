# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ASGI type definitions for genro-static.

Purpose
=======
Type aliases for the ASGI interface used by the outer surfaces of the
package (``StaticFiles`` application and the middleware). The resolution
core in ``resolver``, ``cache`` and ``decision`` never touches these types:
it works on plain paths and strings, and the ASGI adapter translates.

Type Definitions
================
Scope : MutableMapping[str, Any]
    Connection metadata. For HTTP: ``method``, ``path``, ``raw_path``,
    ``root_path``, ``headers``, ``query_string``, ``scheme``, ``server``.

Message : MutableMapping[str, Any]
    ``http.response.start`` / ``http.response.body`` and friends.

Receive : Callable[[], Awaitable[Message]]
Send : Callable[[Message], Awaitable[None]]
ASGIApp : Callable[[Scope, Receive, Send], Awaitable[None]]

Design Decisions
================
MutableMapping instead of TypedDict: servers add their own scope keys
(``root_path`` set by mounts is one of them), so a rigid TypedDict would
reject valid scopes.

References
==========
- ASGI HTTP Spec: https://asgi.readthedocs.io/en/latest/specs/www.html
"""

from typing import Any, Awaitable, Callable, MutableMapping

__all__ = ["Scope", "Message", "Receive", "Send", "ASGIApp"]

# ASGI Scope - connection metadata
Scope = MutableMapping[str, Any]

# ASGI Message - sent/received data
Message = MutableMapping[str, Any]

# ASGI Receive - callable to receive messages
Receive = Callable[[], Awaitable[Message]]

# ASGI Send - callable to send messages
Send = Callable[[Message], Awaitable[None]]

# ASGI Application - the main callable
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]
