"""Application state, assembly of the web application, and the server loop."""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass, field
from typing import Optional

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import Response

from itemserver.cors import cors_layer
from itemserver.errors import error_response
from itemserver.request_logging import RequestLoggingMiddleware
from itemserver.routes import create_routes
from itemserver.store import DataStore

logger = logging.getLogger(__name__)

APP_NAME = "Item HTTP Server"
VERSION = "0.1.0"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


@dataclass
class AppState:
    """Shared state handed to every request handler."""

    app_name: str = APP_NAME
    version: str = VERSION
    store: DataStore = field(default_factory=DataStore)


async def _handle_error(request: Request, exc: Exception) -> Response:
    return error_response(exc)


def create_app(state: Optional[AppState] = None) -> Starlette:
    """Build the application with its routes, CORS policy and request logging."""
    state = state if state is not None else AppState()
    app = Starlette(
        routes=create_routes(),
        middleware=[Middleware(RequestLoggingMiddleware), cors_layer()],
        exception_handlers={Exception: _handle_error},
    )
    app.state.app_name = state.app_name
    app.state.version = state.version
    app.state.store = state.store
    return app


async def run_server(app: Starlette, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Serve ``app`` until interrupted or terminated, then shut down gracefully.

    Raises OSError when the address cannot be bound.
    """
    logger.info("Starting server on %s:%d", host, port)
    sock = socket.create_server((host, port))
    try:
        config = uvicorn.Config(app, log_config=None)
        server = uvicorn.Server(config)
        await server.serve(sockets=[sock])
    finally:
        sock.close()