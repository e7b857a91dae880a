"""
Storage abstraction layer.

All persistence goes through this interface. This allows swapping
implementations (in-memory → MongoDB, PostgreSQL JSONB, DynamoDB, ...)
without changing application code.

The store is a key-indexed document store: a single `save` of one
document is atomic, there are no cross-document transactions.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any


# =============================================================================
# Errors
# =============================================================================


class DuplicateKeyError(Exception):
    """A unique index rejected a write."""

    def __init__(self, collection: str, field: str, value: Any):
        self.collection = collection
        self.field = field
        self.value = value
        super().__init__(f"Duplicate {collection}.{field}: {value!r}")


# =============================================================================
# Storage Interface
# =============================================================================


class MetadataStorage(ABC):
    """
    Storage for structured documents (users, items, bookings, posts).

    Filter semantics for `query` / `find_one`:
    - plain value: equality, or membership when the stored value is a list
    - compiled regex: matches string values
    """

    @abstractmethod
    async def save(self, collection: str, id: str, data: dict[str, Any]) -> None:
        """Insert or replace a document. Raises DuplicateKeyError."""
        pass

    @abstractmethod
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def delete(self, collection: str, id: str) -> bool:
        """Delete a document."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Query documents with optional filters."""
        pass

    async def find_one(self, collection: str, filters: dict[str, Any]) -> dict[str, Any] | None:
        """First document matching `filters`."""
        results = await self.query(collection, filters, limit=1)
        return results[0] if results else None


def matches(doc: dict[str, Any], filters: dict[str, Any]) -> bool:
    """Whether `doc` satisfies every filter."""
    for key, expected in filters.items():
        actual = doc.get(key)
        if isinstance(expected, re.Pattern):
            if not isinstance(actual, str) or not expected.search(actual):
                return False
        elif isinstance(actual, list) and not isinstance(expected, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


# =============================================================================
# Collection Names
# =============================================================================


class Collections:
    """Standard collection names."""

    USERS = "users"
    ITEMS = "items"
    BOOKINGS = "bookings"
    POSTS = "posts"


# Unique indexes every implementation must enforce
UNIQUE_INDEXES: dict[str, tuple[str, ...]] = {
    Collections.USERS: ("email",),
    Collections.ITEMS: ("slug",),
}
