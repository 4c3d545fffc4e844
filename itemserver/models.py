"""Request and response models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


def _jsonable(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, Mapping):
        return {key: _jsonable(inner) for key, inner in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(inner) for inner in value]
    return value


@dataclass
class JsonPayload:
    """A generic JSON message body."""

    message: str
    timestamp: Optional[int] = None
    data: Any = None


@dataclass
class FormPayload:
    """A URL-encoded form submission."""

    name: str
    email: str
    message: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FormPayload":
        """Build a payload from decoded form fields.

        Raises ValueError when a required field is missing.
        """
        for field in ("name", "email"):
            if field not in data or data[field] is None:
                raise ValueError(f"missing field `{field}`")
        message = data.get("message")
        return cls(
            name=str(data["name"]),
            email=str(data["email"]),
            message=None if message is None else str(message),
        )


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """The envelope wrapped around every successful API payload."""

    is_success: bool
    data: Optional[T] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        return cls(is_success=True, data=data, message=None)

    @classmethod
    def error(cls, message: str) -> "ApiResponse[Any]":
        return cls(is_success=False, data=None, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the envelope."""
        return {
            "success": self.is_success,
            "data": _jsonable(self.data),
            "message": self.message,
        }