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

"""genro-static - Static file handler for ASGI pipelines.

Core (synchronous, no ASGI dependency):
    StaticHandler: root + optional CachePolicy, handle(request) -> decision
    StaticRequest: per-request descriptor (segments, method, urls, IMS header)
    resolve: URL path segments -> File | Index | NeedsRedirect | Missing
    build_redirect: slash-terminated 301 target
    negotiate: If-Modified-Since and cache headers
    assemble: outcome -> Ok | RedirectTo | NotModified | NotFound | IoError

ASGI surfaces:
    StaticFiles: ASGI application serving a directory
    StaticFilesMiddleware: StaticFiles mounted under a prefix
    ErrorMiddleware, LoggingMiddleware: error responses and access log
    StaticServer: config + middleware chain + uvicorn

Usage:
    from genro_static import StaticHandler, StaticRequest

    handler = StaticHandler("./public").with_cache(86400)
    decision = handler.handle(StaticRequest.from_path("/docs/"))
    decision.status_code, decision.headers
"""

__version__ = "0.1.0"

from .cache import CacheHeaders, CachePolicy, Negotiation, negotiate
from .decision import (
    IoError,
    NotFound,
    NotModified,
    Ok,
    RedirectTo,
    ResponseDecision,
    assemble,
)
from .exceptions import (
    FileError,
    FileErrorKind,
    HTTPException,
)
from .handler import RequestHandler, StaticHandler, StaticRequest
from .redirect import RedirectTarget, build_redirect
from .resolver import (
    File,
    FileMetadata,
    Index,
    Missing,
    NeedsRedirect,
    ResolutionOutcome,
    resolve,
    split_path,
)
from .static import StaticFiles
from .types import ASGIApp, Message, Receive, Scope, Send
from .middleware import BaseMiddleware, middleware_chain
from .middleware.errors import ErrorMiddleware
from .middleware.logging import LoggingMiddleware
from .middleware.static import StaticFilesMiddleware
from .server import StaticServer

__all__ = [
    # Core
    "StaticHandler",
    "StaticRequest",
    "RequestHandler",
    # Resolver
    "resolve",
    "split_path",
    "ResolutionOutcome",
    "File",
    "Index",
    "NeedsRedirect",
    "Missing",
    "FileMetadata",
    # Redirect
    "build_redirect",
    "RedirectTarget",
    # Cache
    "CachePolicy",
    "CacheHeaders",
    "Negotiation",
    "negotiate",
    # Decisions
    "assemble",
    "ResponseDecision",
    "Ok",
    "RedirectTo",
    "NotModified",
    "NotFound",
    "IoError",
    # Exceptions
    "HTTPException",
    "FileError",
    "FileErrorKind",
    # ASGI types
    "ASGIApp",
    "Message",
    "Receive",
    "Scope",
    "Send",
    # ASGI surfaces
    "StaticFiles",
    "BaseMiddleware",
    "middleware_chain",
    "ErrorMiddleware",
    "LoggingMiddleware",
    "StaticFilesMiddleware",
    "StaticServer",
]
