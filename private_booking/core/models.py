"""
Core data models for the booking platform.

These models represent the fundamental entities: Users, Items (bookable
listings with their infos and places), Bookings and Posts. Each entity
declares the fields that may never change once it has been stored.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import ClassVar, TypeVar

from pydantic import BaseModel, Field

from private_booking.core.errors import NotFoundError, ValidationError
from private_booking.core.passwords import DEFAULT_ROUNDS, hash_password, verify_password
from private_booking.core.utils import generate_id, utc_now


# =============================================================================
# Enums
# =============================================================================


class BookingStatus(str, Enum):
    """Well-known booking statuses. `status` itself is a free string."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REFUSED = "refused"


class Entity(BaseModel):
    """Base for stored entities."""

    immutable_fields: ClassVar[tuple[str, ...]] = ("id",)

    id: str

    def changed_immutable_fields(self, stored: Entity) -> list[str]:
        """Names of immutable fields whose value differs from `stored`."""
        return [
            name for name in self.immutable_fields
            if getattr(self, name) != getattr(stored, name)
        ]


# =============================================================================
# User
# =============================================================================


class User(Entity):
    """
    A platform user.

    A user without `password_hash` has been invited but has not completed
    registration: they can receive action tokens but cannot log in.
    """

    id: str = Field(default_factory=lambda: generate_id("user"))

    email: str
    name: str = ""
    profile_image: str | None = None
    is_admin: bool = False

    # Credentials
    password_hash: str | None = None
    refresh_token_hash: str | None = None

    # Items this user can book and post on
    items: list[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utc_now)

    @property
    def is_registered(self) -> bool:
        return self.password_hash is not None

    def set_password(self, password: str, rounds: int = DEFAULT_ROUNDS) -> None:
        """Hash and store `password`."""
        try:
            self.password_hash = hash_password(password, rounds=rounds)
        except ValueError as e:
            raise ValidationError.single("password", str(e), type="invalid")

    def verify_password(self, password: str) -> bool:
        return verify_password(password, self.password_hash)

    def has_access(self, item_id: str) -> bool:
        return item_id in self.items


# =============================================================================
# Item
# =============================================================================


class Address(BaseModel):
    """Postal address and coordinates; every part is optional."""

    street: str | None = None
    zip: str | None = None
    city: str | None = None
    country: str | None = None
    lat: float | None = None
    long: float | None = None


class Info(BaseModel):
    """Free-form informational entry shown on an item."""

    id: str = Field(default_factory=lambda: generate_id("info"))
    title: str
    message: str
    image: str | None = None


class Place(BaseModel):
    """Point of interest tied to an item."""

    id: str = Field(default_factory=lambda: generate_id("place"))
    name: str
    description: str
    type: str | None = None


class Item(Entity):
    """
    A bookable listing.

    `name`, `slug` and `owner` are fixed at creation. `managers` starts as
    `[owner]`; infos and places are owned exclusively by the item and are
    persisted with it.
    """

    immutable_fields: ClassVar[tuple[str, ...]] = ("id", "name", "slug", "owner")

    id: str = Field(default_factory=lambda: generate_id("item"))

    name: str
    slug: str

    owner: str
    managers: list[str] = Field(default_factory=list)

    description: str = ""
    address: Address = Field(default_factory=Address)
    images: list[str] = Field(default_factory=list)
    equipments: list[str] = Field(default_factory=list)

    infos: list[Info] = Field(default_factory=list)
    places: list[Place] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utc_now)

    # -------------------------------------------------------------------------
    # Sub-collections
    # -------------------------------------------------------------------------

    def get_info(self, info_id: str) -> Info:
        return _find_entry(self.infos, info_id)

    def remove_info(self, info_id: str) -> Info:
        info = self.get_info(info_id)
        self.infos.remove(info)
        return info

    def get_place(self, place_id: str) -> Place:
        return _find_entry(self.places, place_id)

    def remove_place(self, place_id: str) -> Place:
        place = self.get_place(place_id)
        self.places.remove(place)
        return place


EntryT = TypeVar("EntryT", Info, Place)


def _find_entry(entries: list[EntryT], entry_id: str) -> EntryT:
    for entry in entries:
        if entry.id == entry_id:
            return entry
    raise NotFoundError()


# =============================================================================
# Booking
# =============================================================================


class Booking(Entity):
    """A request by `user` to book `item` on `date`."""

    immutable_fields: ClassVar[tuple[str, ...]] = ("id", "date", "item", "created_at")

    id: str = Field(default_factory=lambda: generate_id("book"))

    date: datetime
    item: str
    user: str

    status: str = BookingStatus.PENDING.value
    comment: str = ""

    created_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Post
# =============================================================================


class Post(Entity):
    """A message on an item's feed."""

    immutable_fields: ClassVar[tuple[str, ...]] = ("id", "author", "item", "created_at")

    id: str = Field(default_factory=lambda: generate_id("post"))

    message: str
    images: list[str] = Field(default_factory=list)

    author: str
    item: str

    created_at: datetime = Field(default_factory=utc_now)
