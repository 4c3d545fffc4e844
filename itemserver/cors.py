"""Cross-origin resource sharing policies for the HTTP server."""

from __future__ import annotations

from collections.abc import Iterable

from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware

MAX_AGE_SECONDS = 3600

DEVELOPMENT_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:5173",
    "http://localhost:5174",
    "http://localhost:8080",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:8080",
    "https://localhost:3000",
    "https://localhost:8080",
)

_ALL_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")
_PRODUCTION_METHODS = ("GET", "POST", "PUT", "DELETE")

_ALL_HEADERS = (
    "content-type",
    "authorization",
    "accept",
    "x-requested-with",
    "user-agent",
    "origin",
    "referer",
    "cache-control",
)
_PRODUCTION_HEADERS = ("content-type", "authorization", "accept")
_EXPOSED_HEADERS = ("x-request-id", "x-response-time")


def _is_valid_header_value(value: str) -> bool:
    """Whether ``value`` may be sent as an HTTP header value."""
    return all(char == "\t" or (char >= " " and char != "\x7f") for char in value)


def _valid_origins(origins: Iterable[str]) -> list[str]:
    return [origin for origin in origins if _is_valid_header_value(origin)]


def cors_layer() -> Middleware:
    """Policy for local development front ends, with credentials allowed."""
    return Middleware(
        CORSMiddleware,
        allow_origins=_valid_origins(DEVELOPMENT_ORIGINS),
        allow_methods=list(_ALL_METHODS),
        allow_headers=list(_ALL_HEADERS),
        expose_headers=list(_EXPOSED_HEADERS),
        allow_credentials=True,
        max_age=MAX_AGE_SECONDS,
    )


def cors_layer_permissive() -> Middleware:
    """Policy that accepts any origin, method and header, without credentials."""
    return Middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
        allow_credentials=False,
        max_age=MAX_AGE_SECONDS,
    )


def cors_layer_production(allowed_origins: Iterable[str]) -> Middleware:
    """Restrictive policy for the given origins; invalid origins are dropped."""
    return Middleware(
        CORSMiddleware,
        allow_origins=_valid_origins(allowed_origins),
        allow_methods=list(_PRODUCTION_METHODS),
        allow_headers=list(_PRODUCTION_HEADERS),
        allow_credentials=True,
        max_age=MAX_AGE_SECONDS,
    )