"""Thread-safe in-memory item store."""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from itemserver.errors import NotFoundError


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _rfc3339(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _not_found(item_id: int) -> NotFoundError:
    return NotFoundError(f"Item with id {item_id} not found")


@dataclass
class Item:
    """A stored item."""

    id: int
    name: str
    description: Optional[str]
    created_at: datetime
    updated_at: datetime
    tags: list[str] = field(default_factory=list)
    metadata: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the item."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": _rfc3339(self.created_at),
            "updated_at": _rfc3339(self.updated_at),
            "tags": list(self.tags),
            "metadata": copy.deepcopy(self.metadata),
        }


class DataStore:
    """Items keyed by id, seeded with two samples; ids start after them."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        now = _now()
        self._items: dict[int, Item] = {
            1: Item(
                id=1,
                name="Sample Item 1",
                description="This is a sample item",
                created_at=now,
                updated_at=now,
                tags=["sample", "demo"],
                metadata={"category": "electronics", "price": 99.99},
            ),
            2: Item(
                id=2,
                name="Sample Item 2",
                description=None,
                created_at=now,
                updated_at=now,
                tags=["demo"],
                metadata=None,
            ),
        }
        self._next_id = 3

    def get_items(self, limit: Optional[int] = None, offset: Optional[int] = None) -> list[Item]:
        """Return items in id order, skipping ``offset`` and keeping at most ``limit``."""
        if limit is not None and limit < 0:
            raise ValueError("limit must not be negative")
        if offset is not None and offset < 0:
            raise ValueError("offset must not be negative")
        with self._lock:
            ordered = [copy.deepcopy(self._items[key]) for key in sorted(self._items)]
        start = offset or 0
        stop = None if limit is None else start + limit
        return ordered[start:stop]

    def get_item(self, item_id: int) -> Item:
        with self._lock:
            try:
                return copy.deepcopy(self._items[item_id])
            except KeyError:
                raise _not_found(item_id) from None

    def create_item(
        self,
        name: str,
        description: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        metadata: Any = None,
    ) -> Item:
        with self._lock:
            item_id = self._next_id
            self._next_id += 1
            now = _now()
            item = Item(
                id=item_id,
                name=name,
                description=description,
                created_at=now,
                updated_at=now,
                tags=list(tags or []),
                metadata=copy.deepcopy(metadata),
            )
            self._items[item_id] = item
            return copy.deepcopy(item)

    def update_item(
        self,
        item_id: int,
        name: str,
        description: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        metadata: Any = None,
    ) -> Item:
        """Replace every editable field of an existing item."""
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                raise _not_found(item_id)
            item.name = name
            item.description = description
            item.tags = list(tags or [])
            item.metadata = copy.deepcopy(metadata)
            item.updated_at = _now()
            return copy.deepcopy(item)

    def patch_item(self, item_id: int, updates: Mapping[str, Any]) -> Item:
        """Apply a partial update; values of the wrong type are ignored."""
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                raise _not_found(item_id)

            name = updates.get("name")
            if isinstance(name, str):
                item.name = name

            if "description" in updates:
                description = updates["description"]
                if description is None:
                    item.description = None
                elif isinstance(description, str):
                    item.description = description

            tags = updates.get("tags")
            if isinstance(tags, list):
                item.tags = [tag for tag in tags if isinstance(tag, str)]

            if "metadata" in updates:
                item.metadata = copy.deepcopy(updates["metadata"])

            item.updated_at = _now()
            return copy.deepcopy(item)

    def delete_item(self, item_id: int) -> None:
        with self._lock:
            if self._items.pop(item_id, None) is None:
                raise _not_found(item_id)

    def get_stats(self) -> dict[str, Any]:
        """Return the item count and the set of distinct tags."""
        with self._lock:
            tags = {tag for item in self._items.values() for tag in item.tags}
            total = len(self._items)
        return {
            "total_items": total,
            "unique_tags": len(tags),
            "tags": sorted(tags),
        }