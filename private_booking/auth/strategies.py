"""
Authentication strategies.

A closed set of variants, each resolving an Actor from a request or
raising UnauthorizedError. Routes pick their strategy when they are
declared:

    AccessTokenAuth()                      API calls
    RefreshTokenAuth()                     token rotation
    ActionTokenAuth(TokenAction.REGISTER)  mailed single-purpose links
    LocalCredentialAuth(source="json")     email + password
    SessionAuth()                          browser session cookie

Unknown email and wrong password fail identically.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Literal

from fastapi import Request
from fastapi.security.utils import get_authorization_scheme_param

from private_booking.auth.context import Actor
from private_booking.auth.tokens import TokenAction, TokenError
from private_booking.core.errors import UnauthorizedError
from private_booking.dependencies import get_services

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


def extract_bearer_token(request: Request) -> str:
    """The token of an `Authorization: Bearer <token>` header."""
    scheme, token = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedError("Missing bearer token")
    return token


class AuthStrategy(ABC):
    """Common interface of every strategy."""

    name: str

    @abstractmethod
    async def authenticate(self, request: Request) -> Actor:
        """Resolve the actor or raise UnauthorizedError."""
        pass


# =============================================================================
# Token strategies
# =============================================================================


class AccessTokenAuth(AuthStrategy):
    """Bearer access token. The user record is not loaded."""

    name = "access"

    async def authenticate(self, request: Request) -> Actor:
        services = get_services(request)
        claims = services.tokens.verify_access_token(extract_bearer_token(request))
        return Actor(user_id=claims.sub, strategy=self.name, claims=claims.model_dump())


class RefreshTokenAuth(AuthStrategy):
    """Bearer refresh token matching the user's current refresh hash."""

    name = "refresh"

    async def authenticate(self, request: Request) -> Actor:
        services = get_services(request)
        token = extract_bearer_token(request)
        claims = services.tokens.decode_refresh_token(token)

        user = await services.users.get(claims.sub)
        if user is None:
            raise UnauthorizedError("Unrecognized refresh token")

        try:
            services.tokens.verify_refresh_token(token, user)
        except TokenError:
            logger.info(f"Stale refresh token presented for {user.id}")
            raise

        return Actor(user_id=user.id, strategy=self.name, user=user, claims=claims.model_dump())


class ActionTokenAuth(AuthStrategy):
    """Bearer action token issued for exactly `action`."""

    name = "action"

    def __init__(self, action: TokenAction | str):
        self.action = TokenAction(action)

    async def authenticate(self, request: Request) -> Actor:
        services = get_services(request)
        claims = services.tokens.verify_action_token(extract_bearer_token(request), self.action)

        user = await services.users.get(claims.sub)
        if user is None:
            raise UnauthorizedError("Unrecognized action token")

        # register tokens are spent once the account has a password
        if self.action is TokenAction.REGISTER and user.is_registered:
            logger.info(f"Register token presented for registered user {user.id}")
            raise UnauthorizedError("Registration already completed")

        return Actor(user_id=user.id, strategy=self.name, user=user, claims=claims.model_dump())


# =============================================================================
# Credential strategies
# =============================================================================


class LocalCredentialAuth(AuthStrategy):
    """Email and password from a JSON body or a submitted form."""

    name = "local"

    def __init__(self, source: Literal["json", "form"] = "json"):
        self.source = source

    async def _read_credentials(self, request: Request) -> tuple[str, str]:
        try:
            if self.source == "form":
                data = await request.form()
            else:
                data = await request.json()
        except ValueError:
            raise UnauthorizedError("Authentication failed")

        if not hasattr(data, "get"):
            raise UnauthorizedError("Authentication failed")
        email, password = data.get("email"), data.get("password")
        if not isinstance(email, str) or not isinstance(password, str):
            raise UnauthorizedError("Authentication failed")
        return email, password

    async def authenticate(self, request: Request) -> Actor:
        services = get_services(request)
        email, password = await self._read_credentials(request)

        user = await services.users.find_by_email(email)
        if user is None or not user.verify_password(password):
            logger.info("Local authentication failed")
            raise UnauthorizedError("Authentication failed")

        return Actor(user_id=user.id, strategy=self.name, user=user)


class SessionAuth(AuthStrategy):
    """User id stored in the signed session cookie by the web login."""

    name = "session"

    async def authenticate(self, request: Request) -> Actor:
        services = get_services(request)
        user_id = request.session.get(SESSION_USER_KEY)
        if not user_id:
            raise UnauthorizedError("No active session")

        user = await services.users.get(user_id)
        if user is None:
            request.session.clear()
            raise UnauthorizedError("No active session")

        return Actor(user_id=user.id, strategy=self.name, user=user)
