"""
Permission predicates.

Pure functions over already-loaded actors and resources. They return
booleans; callers turn `False` into ForbiddenError after the resource
has been found.
"""

from __future__ import annotations

from private_booking.core.models import Booking, Item, Post, User


# =============================================================================
# Items
# =============================================================================


def is_item_manager(item: Item, user_id: str | None) -> bool:
    return user_id is not None and user_id in item.managers


def is_item_owner(item: Item, user_id: str | None) -> bool:
    return user_id is not None and item.owner == user_id


def has_item_access(item: Item, user: User | None) -> bool:
    """Whether `user` can see the item, book it and post on it."""
    if user is None:
        return False
    return user.is_admin or user.has_access(item.id) or is_item_manager(item, user.id)


def can_delete_item(item: Item, actor: User | None) -> bool:
    if actor is None:
        return False
    return is_item_owner(item, actor.id) or actor.is_admin


# =============================================================================
# Bookings
# =============================================================================


def can_update_booking(booking: Booking, item: Item, actor_id: str | None) -> bool:
    """The requester or any manager of the booked item."""
    return (actor_id is not None and booking.user == actor_id) or is_item_manager(item, actor_id)


can_view_booking = can_update_booking
can_delete_booking = can_update_booking


# =============================================================================
# Posts
# =============================================================================


def can_update_post(post: Post, actor_id: str | None) -> bool:
    return actor_id is not None and post.author == actor_id


def can_delete_post(post: Post, item: Item, actor_id: str | None) -> bool:
    return can_update_post(post, actor_id) or is_item_manager(item, actor_id)


# =============================================================================
# Users & relationships
# =============================================================================


def can_invite(item: Item, actor_id: str | None) -> bool:
    return is_item_manager(item, actor_id)


def can_unregister_user(item: Item, target_user_id: str, actor_id: str | None) -> bool:
    """
    Anyone may leave an item and managers may remove anyone, except the
    owner, who can never be unregistered.
    """
    if target_user_id == item.owner:
        return False
    return target_user_id == actor_id or is_item_manager(item, actor_id)


def can_administer_users(actor: User | None) -> bool:
    return actor is not None and actor.is_admin
