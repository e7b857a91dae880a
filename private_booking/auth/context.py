"""
Auth context - the "who is acting on what" for each request.

This is the lightweight object passed to route handlers. Guards fill it
in order: the strategy sets the actor, loaders attach the resources the
route names, then policies are checked against it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from private_booking.core.errors import ForbiddenError
from private_booking.core.models import Booking, Item, Post, User


@dataclass
class Actor:
    """The identity resolved from a verified token or session."""

    user_id: str
    strategy: str

    # Loaded by strategies that need the user record (refresh, action, local, session)
    user: User | None = None

    claims: dict[str, Any] = field(default_factory=dict)


@dataclass
class AuthContext:
    """
    Authorization context for a request.

    Usage in routes:
        async def update_booking(
            ctx: AuthContext = Depends(require(BOOKING_EDITOR, load=[load_item(), load_booking()])),
        ):
            ctx.booking.status = "accepted"
    """

    actor: Actor

    # Loaded resources
    item: Item | None = None
    booking: Booking | None = None
    post: Post | None = None
    target_user: User | None = None

    @property
    def user_id(self) -> str:
        return self.actor.user_id

    @property
    def user(self) -> User | None:
        """The actor's user record, when a strategy or loader fetched it."""
        return self.actor.user

    @property
    def is_admin(self) -> bool:
        return self.actor.user is not None and self.actor.user.is_admin

    def require(self, allowed: bool, message: str | None = None) -> None:
        """
        Raise ForbiddenError unless `allowed`.

        Usage:
            ctx.require(can_delete_post(ctx.post, ctx.item, ctx.user_id))
        """
        if not allowed:
            raise ForbiddenError(message)
