"""
Policies - the clean interface for route authorization.

Just use: `ctx: AuthContext = Depends(require(ITEM_MANAGER, load=[load_item()]))`

Design:
- `require()` returns a FastAPI dependency that resolves to AuthContext
- Guards run in a fixed order and stop at the first failure:
    1. strategy   → 401 UnauthorizedError
    2. loaders    → 404 NotFoundError
    3. policies   → 403 ForbiddenError
  so a caller without rights on a missing resource sees 404.
- Each guard is a plain callable and can be tested on its own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Sequence

from fastapi import Depends, Request

from private_booking.auth.context import AuthContext
from private_booking.auth import permissions
from private_booking.auth.strategies import AccessTokenAuth, AuthStrategy
from private_booking.core.errors import ForbiddenError, NotFoundError
from private_booking.dependencies import get_services

if TYPE_CHECKING:
    from private_booking.services.container import ServiceContainer

Loader = Callable[[AuthContext, Request, "ServiceContainer"], Awaitable[None]]


# =============================================================================
# Policy - the core authorization type
# =============================================================================


class Policy:
    """
    A named predicate over a populated AuthContext.

    Policies are composable:
        ITEM_MANAGER | ADMIN        # either
        ITEM_ACCESS & POST_AUTHOR   # both
    """

    def __init__(self, check: Callable[[AuthContext], bool], message: str = "Forbidden"):
        self.check = check
        self.message = message

    def __call__(self, ctx: AuthContext) -> bool:
        return bool(self.check(ctx))

    def __or__(self, other: Policy) -> Policy:
        return Policy(lambda ctx: self(ctx) or other(ctx), f"{self.message} or {other.message}")

    def __and__(self, other: Policy) -> Policy:
        return Policy(lambda ctx: self(ctx) and other(ctx), f"{self.message} and {other.message}")

    def enforce(self, ctx: AuthContext) -> None:
        if not self(ctx):
            raise ForbiddenError(self.message)


ADMIN = Policy(
    lambda ctx: permissions.can_administer_users(ctx.user),
    "Insufficient rights",
)
ITEM_MANAGER = Policy(
    lambda ctx: permissions.is_item_manager(ctx.item, ctx.user_id),
    "Requires item manager",
)
ITEM_ACCESS = Policy(
    lambda ctx: permissions.has_item_access(ctx.item, ctx.user),
    "No access to this item",
)
ITEM_DELETER = Policy(
    lambda ctx: permissions.can_delete_item(ctx.item, ctx.user),
    "Requires item owner",
)
CAN_INVITE = Policy(
    lambda ctx: permissions.can_invite(ctx.item, ctx.user_id),
    "Requires item manager",
)
CAN_UNREGISTER = Policy(
    lambda ctx: permissions.can_unregister_user(ctx.item, ctx.target_user.id, ctx.user_id),
    "Cannot unregister this user",
)
BOOKING_EDITOR = Policy(
    lambda ctx: permissions.can_update_booking(ctx.booking, ctx.item, ctx.user_id),
    "Requires booking requester or item manager",
)
POST_AUTHOR = Policy(
    lambda ctx: permissions.can_update_post(ctx.post, ctx.user_id),
    "Requires post author",
)
POST_DELETER = Policy(
    lambda ctx: permissions.can_delete_post(ctx.post, ctx.item, ctx.user_id),
    "Requires post author or item manager",
)


# =============================================================================
# Loaders - attach path resources to the context
# =============================================================================


def load_actor() -> Loader:
    """
    Fetch the actor's user record when the strategy did not.

    A vanished user is left as None so policies deny rather than 404.
    """
    async def loader(ctx: AuthContext, request: Request, services: ServiceContainer) -> None:
        if ctx.actor.user is None:
            ctx.actor.user = await services.users.get(ctx.user_id)
    return loader


def load_me() -> Loader:
    """The actor's user record as target user; 404 if it no longer exists."""
    async def loader(ctx: AuthContext, request: Request, services: ServiceContainer) -> None:
        user = ctx.actor.user or await services.users.get(ctx.user_id)
        if user is None:
            raise NotFoundError("User not found")
        ctx.actor.user = user
        ctx.target_user = user
    return loader


def load_target_user(param: str = "user_id") -> Loader:
    async def loader(ctx: AuthContext, request: Request, services: ServiceContainer) -> None:
        user = await services.users.get(request.path_params[param])
        if user is None:
            raise NotFoundError("User not found")
        ctx.target_user = user
    return loader


def load_item(param: str = "slug") -> Loader:
    """Item by slug."""
    async def loader(ctx: AuthContext, request: Request, services: ServiceContainer) -> None:
        item = await services.items.find_by_slug(request.path_params[param])
        if item is None:
            raise NotFoundError("Item not found")
        ctx.item = item
    return loader


def load_booking(param: str = "booking_id") -> Loader:
    """Booking by id; must belong to the already loaded item."""
    async def loader(ctx: AuthContext, request: Request, services: ServiceContainer) -> None:
        booking = await services.bookings.get(request.path_params[param])
        if booking is None or (ctx.item is not None and booking.item != ctx.item.id):
            raise NotFoundError("Booking not found")
        ctx.booking = booking
    return loader


def load_post(param: str = "post_id") -> Loader:
    """Post by id; must belong to the already loaded item."""
    async def loader(ctx: AuthContext, request: Request, services: ServiceContainer) -> None:
        post = await services.posts.get(request.path_params[param])
        if post is None or (ctx.item is not None and post.item != ctx.item.id):
            raise NotFoundError("Post not found")
        ctx.post = post
    return loader


# =============================================================================
# Main Interface - the require() function
# =============================================================================


async def authorize(
    request: Request,
    services: ServiceContainer,
    strategy: AuthStrategy,
    loaders: Iterable[Loader] = (),
    policies: Iterable[Policy] = (),
) -> AuthContext:
    """Run the guard chain: strategy, then loaders, then policies."""
    ctx = AuthContext(actor=await strategy.authenticate(request))

    for loader in loaders:
        await loader(ctx, request, services)

    for policy in policies:
        policy.enforce(ctx)

    return ctx


def require(
    *policies: Policy,
    auth: AuthStrategy | None = None,
    load: Sequence[Loader] = (),
) -> Callable:
    """
    Guard a route.

    Usage:
        @router.patch("/items/{slug}/bookings/{booking_id}")
        async def update_booking(
            ctx: AuthContext = Depends(require(
                BOOKING_EDITOR, load=[load_item(), load_booking()],
            )),
        ):
            # ctx.booking and ctx.item are loaded, ctx.user_id may edit
            ...

    Args:
        *policies: Policies that must all hold
        auth: Strategy resolving the actor (default: AccessTokenAuth)
        load: Loaders run in order before the policies

    Returns:
        FastAPI dependency that resolves to AuthContext
    """
    strategy = auth or AccessTokenAuth()
    loaders = list(load)

    async def dependency(
        request: Request,
        services=Depends(get_services),
    ) -> AuthContext:
        return await authorize(request, services, strategy, loaders, policies)

    return dependency


def require_auth(auth: AuthStrategy | None = None) -> Callable:
    """Just require an actor, no resource or policy."""
    return require(auth=auth)
