"""
Storage abstractions.

- MetadataStorage → document store (in-memory locally; MongoDB or
  PostgreSQL JSONB in production)
- Repositories → typed access per entity
"""

from private_booking.storage.base import (
    Collections,
    DuplicateKeyError,
    MetadataStorage,
)
from private_booking.storage.local import InMemoryMetadataStorage, create_local_storage
from private_booking.storage.repositories import (
    BookingRepository,
    ItemRepository,
    PostRepository,
    Repository,
    UserRepository,
)

__all__ = [
    "Collections",
    "DuplicateKeyError",
    "MetadataStorage",
    "InMemoryMetadataStorage",
    "create_local_storage",
    "BookingRepository",
    "ItemRepository",
    "PostRepository",
    "Repository",
    "UserRepository",
]
