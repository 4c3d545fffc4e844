"""HTTP route handlers for the item API.

Handlers read ``app_name``, ``version`` and ``store`` from the application's
``state``.
"""

from __future__ import annotations

import functools
import json
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import parse_qsl

from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from itemserver.errors import AppError, BadRequestError
from itemserver.models import ApiResponse, FormPayload

logger = logging.getLogger(__name__)

_UNSIGNED_MAX = 2**64 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")
_MAX_NAME_BYTES = 100
_ALL_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]

Handler = Callable[[Request], Awaitable[Response]]


class _Rejection(Exception):
    """A request that could not be decoded into what a handler expects."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def to_response(self) -> Response:
        return PlainTextResponse(self.message, status_code=self.status_code)


def _guarded(handler: Handler) -> Handler:
    @functools.wraps(handler)
    async def wrapper(request: Request) -> Response:
        try:
            return await handler(request)
        except _Rejection as rejection:
            return rejection.to_response()
        except AppError as error:
            return error.to_response()

    return wrapper


def _ok(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(ApiResponse.success(data).to_dict(), status_code=status_code)


def _parse_unsigned(raw: str) -> Optional[int]:
    if not _UNSIGNED.fullmatch(raw):
        return None
    value = int(raw)
    return value if value <= _UNSIGNED_MAX else None


def _path_id(request: Request) -> int:
    raw = request.path_params["item_id"]
    value = _parse_unsigned(raw)
    if value is None:
        raise _Rejection(400, f"Invalid URL: Cannot parse `{raw}` to a `u64`")
    return value


def _query_unsigned(request: Request, key: str) -> Optional[int]:
    raw = request.query_params.get(key)
    if raw is None:
        return None
    value = _parse_unsigned(raw)
    if value is None:
        raise _Rejection(400, f"Failed to deserialize query string: {key}: invalid digit found in string")
    return value


def _media_type(request: Request) -> str:
    return request.headers.get("content-type", "").split(";", 1)[0].strip().lower()


async def _read_json(request: Request) -> Any:
    media_type = _media_type(request)
    if not (media_type == "application/json" or (media_type.startswith("application/") and media_type.endswith("+json"))):
        raise _Rejection(415, "Expected request with `Content-Type: application/json`")
    body = await request.body()
    try:
        return json.loads(body)
    except ValueError as exc:
        raise _Rejection(400, f"Failed to parse the request body as JSON: {exc}") from None


def _invalid_body(reason: str) -> _Rejection:
    return _Rejection(422, f"Failed to deserialize the JSON body into the target type: {reason}")


@dataclass
class _ItemRequest:
    name: str
    description: Optional[str]
    tags: list[str]
    metadata: Any

    @classmethod
    def parse(cls, value: Any) -> "_ItemRequest":
        if not isinstance(value, dict):
            raise _invalid_body("expected an object")
        if "name" not in value:
            raise _invalid_body("missing field `name`")
        name = value["name"]
        if not isinstance(name, str):
            raise _invalid_body("name: expected a string")
        description = value.get("description")
        if description is not None and not isinstance(description, str):
            raise _invalid_body("description: expected a string")
        tags = value.get("tags")
        if tags is None:
            tags = []
        elif not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
            raise _invalid_body("tags: expected a sequence of strings")
        return cls(name=name, description=description, tags=list(tags), metadata=value.get("metadata"))


def _require_valid_id(item_id: int) -> None:
    if item_id == 0:
        raise BadRequestError("Invalid item ID")


def _require_name(name: str) -> None:
    if not name.strip():
        raise BadRequestError("Name cannot be empty")


@_guarded
async def _root(request: Request) -> Response:
    state = request.app.state
    return _ok(
        {
            "app": state.app_name,
            "version": state.version,
            "message": "Welcome to the Rust HTTP Server",
            "endpoints": {
                "health": "/health",
                "stats": "/api/stats",
                "items": "/api/items",
                "item": "/api/items/{id}",
                "form": "/api/form",
            },
        }
    )


@_guarded
async def _health(request: Request) -> Response:
    try:
        stats = request.app.state.store.get_stats()
    except AppError:
        stats = None
    return _ok({"status": "healthy", "timestamp": int(time.time()), "store_stats": stats})


@_guarded
async def _stats(request: Request) -> Response:
    return _ok(request.app.state.store.get_stats())


@_guarded
async def _get_items(request: Request) -> Response:
    limit = _query_unsigned(request, "limit")
    offset = _query_unsigned(request, "offset")
    logger.info("GET /api/items - limit: %s, offset: %s", limit, offset)
    items = request.app.state.store.get_items(limit, offset)
    return _ok({"items": items, "count": len(items), "limit": limit, "offset": offset or 0})


@_guarded
async def _get_item(request: Request) -> Response:
    item_id = _path_id(request)
    logger.info("GET /api/items/%d", item_id)
    _require_valid_id(item_id)
    return _ok(request.app.state.store.get_item(item_id))


@_guarded
async def _post_item(request: Request) -> Response:
    payload = _ItemRequest.parse(await _read_json(request))
    logger.info("POST /api/items - name: %s", payload.name)
    _require_name(payload.name)
    if len(payload.name.encode("utf-8")) > _MAX_NAME_BYTES:
        raise BadRequestError("Name too long (max 100 characters)")
    item = request.app.state.store.create_item(payload.name, payload.description, payload.tags, payload.metadata)
    return _ok(item, status_code=201)


@_guarded
async def _put_item(request: Request) -> Response:
    item_id = _path_id(request)
    payload = _ItemRequest.parse(await _read_json(request))
    logger.info("PUT /api/items/%d - name: %s", item_id, payload.name)
    _require_valid_id(item_id)
    _require_name(payload.name)
    item = request.app.state.store.update_item(
        item_id, payload.name, payload.description, payload.tags, payload.metadata
    )
    return _ok(item)


@_guarded
async def _delete_item(request: Request) -> Response:
    item_id = _path_id(request)
    logger.info("DELETE /api/items/%d", item_id)
    _require_valid_id(item_id)
    request.app.state.store.delete_item(item_id)
    return Response(status_code=204)


@_guarded
async def _patch_item(request: Request) -> Response:
    item_id = _path_id(request)
    updates = await _read_json(request)
    if not isinstance(updates, dict):
        raise _invalid_body("expected a map")
    logger.info("PATCH /api/items/%d - updates: %r", item_id, updates)
    _require_valid_id(item_id)
    if not updates:
        raise BadRequestError("No updates provided")
    return _ok(request.app.state.store.patch_item(item_id, updates))


@_guarded
async def _form_submit(request: Request) -> Response:
    if _media_type(request) != "application/x-www-form-urlencoded":
        raise _Rejection(415, "Form requests must have `Content-Type: application/x-www-form-urlencoded`")
    body = (await request.body()).decode("utf-8", errors="replace")
    try:
        form = FormPayload.from_mapping(dict(parse_qsl(body, keep_blank_values=True)))
    except ValueError as exc:
        raise _Rejection(422, f"Failed to deserialize form body: {exc}") from None
    logger.info("Form submission - name: %s, email: %s", form.name, form.email)

    if not form.email or "@" not in form.email:
        raise BadRequestError("Invalid email address")

    metadata = {
        "source": "form",
        "email": form.email,
        "message": form.message,
        "submitted_at": datetime.now(timezone.utc).isoformat(),
    }
    item = request.app.state.store.create_item(
        f"Form submission from {form.name}",
        f"Submitted by {form.name} ({form.email})",
        ["form-submission"],
        metadata,
    )
    return _ok({"message": "Form submitted successfully", "created_item": item})


@_guarded
async def _head(request: Request) -> Response:
    logger.info("HEAD /api/head")
    state = request.app.state
    try:
        item_count = state.store.get_stats().get("total_items", 0)
    except AppError:
        item_count = 0
    headers = {
        "X-Custom-Header": "HEAD-Response",
        "X-Total-Items": str(item_count),
        "X-Api-Version": str(state.version),
    }
    return Response(status_code=200, headers=headers)


@_guarded
async def _options(request: Request) -> Response:
    logger.info("OPTIONS /api/options")
    body = ApiResponse.success(
        {
            "methods": list(_ALL_METHODS),
            "description": "Available HTTP methods for this endpoint",
            "api_info": {
                "version": "1.0",
                "endpoints": {
                    "items": {
                        "list": "GET /api/items",
                        "create": "POST /api/items",
                        "get": "GET /api/items/:id",
                        "update": "PUT /api/items/:id",
                        "patch": "PATCH /api/items/:id",
                        "delete": "DELETE /api/items/:id",
                    },
                    "form": "POST /api/form",
                    "stats": "GET /api/stats",
                    "health": "GET /health",
                },
            },
        }
    ).to_dict()
    headers = {"Allow": ", ".join(_ALL_METHODS), "X-Accepted-Methods": "ALL"}
    return JSONResponse(body, status_code=200, headers=headers)


def create_routes() -> list[Route]:
    """Return the routes of the API."""
    return [
        Route("/", _root, methods=["GET"]),
        Route("/health", _health, methods=["GET"]),
        Route("/api/stats", _stats, methods=["GET"]),
        Route("/api/items", _get_items, methods=["GET"]),
        Route("/api/items", _post_item, methods=["POST"]),
        Route("/api/items/{item_id}", _get_item, methods=["GET"]),
        Route("/api/items/{item_id}", _put_item, methods=["PUT"]),
        Route("/api/items/{item_id}", _delete_item, methods=["DELETE"]),
        Route("/api/items/{item_id}", _patch_item, methods=["PATCH"]),
        Route("/api/form", _form_submit, methods=["POST"]),
        Route("/api/head", _head, methods=["HEAD"]),
        Route("/api/options", _options, methods=["OPTIONS"]),
    ]