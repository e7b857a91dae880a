"""
Typed repositories over the document store.

Repositories convert between documents and models, reject writes that
would change an immutable field, and turn unique index violations into
ValidationError so they surface as 422 with a per-field message.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from private_booking.core.errors import ValidationError
from private_booking.core.models import Booking, Entity, Item, Post, User
from private_booking.core.slugs import next_available_slug, slug_family_pattern, slugify
from private_booking.core.utils import normalize_email
from private_booking.storage.base import Collections, DuplicateKeyError, MetadataStorage

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)


class Repository(Generic[T]):
    """CRUD for one collection of entities."""

    collection: str
    model: type[T]

    def __init__(self, storage: MetadataStorage):
        self.storage = storage

    def _to_model(self, doc: dict[str, Any]) -> T:
        return self.model.model_validate(doc)

    def _to_document(self, entity: T) -> dict[str, Any]:
        return entity.model_dump(mode="json")

    async def get(self, id: str) -> T | None:
        doc = await self.storage.get(self.collection, id)
        return self._to_model(doc) if doc else None

    async def find_one(self, filters: dict[str, Any]) -> T | None:
        doc = await self.storage.find_one(self.collection, filters)
        return self._to_model(doc) if doc else None

    async def find(self, filters: dict[str, Any] | None = None) -> list[T]:
        docs = await self.storage.query(self.collection, filters)
        return [self._to_model(doc) for doc in docs]

    async def save(self, entity: T) -> T:
        """Insert or update `entity`."""
        stored = await self.get(entity.id)
        if stored is not None:
            changed = entity.changed_immutable_fields(stored)
            if changed:
                raise ValidationError.single(
                    changed[0], f"{changed[0].capitalize()} cannot be changed.", type="immutable"
                )

        try:
            await self.storage.save(self.collection, entity.id, self._to_document(entity))
        except DuplicateKeyError as e:
            raise ValidationError.single(
                e.field, f"{e.field.capitalize()} is already taken.", type="unique"
            ) from e
        return entity

    async def delete(self, id: str) -> bool:
        return await self.storage.delete(self.collection, id)


# =============================================================================
# Users
# =============================================================================


class UserRepository(Repository[User]):
    collection = Collections.USERS
    model = User

    def _to_document(self, entity: User) -> dict[str, Any]:
        entity.email = normalize_email(entity.email)
        return super()._to_document(entity)

    async def find_by_email(self, email: str) -> User | None:
        return await self.find_one({"email": normalize_email(email)})

    async def with_access_to(self, item_id: str) -> list[User]:
        return await self.find({"items": item_id})


# =============================================================================
# Items
# =============================================================================


class ItemRepository(Repository[Item]):
    collection = Collections.ITEMS
    model = Item

    async def find_by_slug(self, slug: str) -> Item | None:
        return await self.find_one({"slug": slug})

    async def owned_by(self, user_id: str) -> list[Item]:
        return await self.find({"owner": user_id})

    async def managed_by(self, user_id: str) -> list[Item]:
        return await self.find({"managers": user_id})

    async def slugs_for(self, base_slug: str) -> list[str]:
        """Existing slugs of the `base_slug` family."""
        docs = await self.storage.query(self.collection, {"slug": slug_family_pattern(base_slug)})
        return [doc["slug"] for doc in docs]

    async def create(self, owner: User, **fields: Any) -> Item:
        """
        Create an item owned and managed by `owner`.

        The slug is allocated here, once, from the item's name.
        """
        base_slug = slugify(fields["name"])
        slug = next_available_slug(base_slug, await self.slugs_for(base_slug))

        item = Item(slug=slug, owner=owner.id, managers=[owner.id], **fields)
        await self.save(item)
        logger.info(f"Item created: {item.slug} (owner {owner.id})")
        return item


# =============================================================================
# Bookings & Posts
# =============================================================================


class BookingRepository(Repository[Booking]):
    collection = Collections.BOOKINGS
    model = Booking

    async def for_item(self, item_id: str, user_id: str | None = None) -> list[Booking]:
        filters: dict[str, Any] = {"item": item_id}
        if user_id is not None:
            filters["user"] = user_id
        return await self.find(filters)


class PostRepository(Repository[Post]):
    collection = Collections.POSTS
    model = Post

    async def for_item(self, item_id: str) -> list[Post]:
        return await self.find({"item": item_id})
