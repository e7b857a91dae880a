"""
Local storage implementation for development and tests.

In-memory document store that works without any external services.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any

from private_booking.storage.base import (
    UNIQUE_INDEXES,
    DuplicateKeyError,
    MetadataStorage,
    matches,
)


# =============================================================================
# In-Memory Metadata Storage
# =============================================================================


class InMemoryMetadataStorage(MetadataStorage):
    """In-memory document storage with unique index enforcement."""

    def __init__(self, unique_indexes: dict[str, tuple[str, ...]] | None = None):
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        self._unique = UNIQUE_INDEXES if unique_indexes is None else unique_indexes

    def _check_unique(self, collection: str, id: str, data: dict[str, Any]) -> None:
        for field in self._unique.get(collection, ()):
            value = data.get(field)
            if value is None:
                continue
            for other_id, doc in self._data.get(collection, {}).items():
                if other_id != id and doc.get(field) == value:
                    raise DuplicateKeyError(collection, field, value)

    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        self._check_unique(collection, id, data)
        if collection not in self._data:
            self._data[collection] = {}
        self._data[collection][id] = {
            **copy.deepcopy(data),
            "_id": id,
            "_updated_at": datetime.now(timezone.utc).isoformat(),
        }

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        doc = self._data.get(collection, {}).get(id)
        return copy.deepcopy(doc) if doc is not None else None

    async def delete(self, collection: str, id: str) -> bool:
        if collection in self._data and id in self._data[collection]:
            del self._data[collection][id]
            return True
        return False

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        if collection not in self._data:
            return []

        results = list(self._data[collection].values())

        if filters:
            results = [doc for doc in results if matches(doc, filters)]

        end = None if limit is None else offset + limit
        return [copy.deepcopy(doc) for doc in results[offset:end]]


def create_local_storage() -> InMemoryMetadataStorage:
    """Create a fresh in-memory store."""
    return InMemoryMetadataStorage()
