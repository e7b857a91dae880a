"""
Authentication and authorization.

Design principles:
1. One dependency per route: `require(*policies, auth=..., load=[...])`
2. A closed set of strategies decides who is calling
3. Resource-scoped predicates (owner / manager / author) decide what they may do
4. Guards run in a fixed order: 401, then 404, then 403
"""

from private_booking.auth.context import Actor, AuthContext
from private_booking.auth.policies import (
    ADMIN,
    BOOKING_EDITOR,
    CAN_INVITE,
    CAN_UNREGISTER,
    ITEM_ACCESS,
    ITEM_DELETER,
    ITEM_MANAGER,
    POST_AUTHOR,
    POST_DELETER,
    Policy,
    authorize,
    load_actor,
    load_booking,
    load_item,
    load_me,
    load_post,
    load_target_user,
    require,
    require_auth,
)
from private_booking.auth.strategies import (
    AccessTokenAuth,
    ActionTokenAuth,
    AuthStrategy,
    LocalCredentialAuth,
    RefreshTokenAuth,
    SessionAuth,
)
from private_booking.auth.tokens import (
    TokenAction,
    TokenError,
    TokenExpiredError,
    TokenInvalidError,
    TokenPair,
    TokenService,
)
from private_booking.auth.routes import router as auth_router
from private_booking.auth.routes import web_router

__all__ = [
    # Main interface
    "require",
    "require_auth",
    "authorize",
    "AuthContext",
    "Actor",
    # Policies
    "Policy",
    "ADMIN",
    "BOOKING_EDITOR",
    "CAN_INVITE",
    "CAN_UNREGISTER",
    "ITEM_ACCESS",
    "ITEM_DELETER",
    "ITEM_MANAGER",
    "POST_AUTHOR",
    "POST_DELETER",
    # Loaders
    "load_actor",
    "load_booking",
    "load_item",
    "load_me",
    "load_post",
    "load_target_user",
    # Strategies
    "AuthStrategy",
    "AccessTokenAuth",
    "ActionTokenAuth",
    "LocalCredentialAuth",
    "RefreshTokenAuth",
    "SessionAuth",
    # Tokens
    "TokenAction",
    "TokenError",
    "TokenExpiredError",
    "TokenInvalidError",
    "TokenPair",
    "TokenService",
    # Routers
    "auth_router",
    "web_router",
]
