# =============================================================================
# JWT Token Service
# =============================================================================
#
# Three kinds of signed bearer tokens:
#   - access  : short-lived, audience-bound to the application URL
#   - refresh : long-lived, carries the user's current refresh hash;
#               issuing a new one invalidates every previous one
#   - action  : single-purpose (register, password-reset)
#
# Claim names kept for interop: sub, aud, exp, hash, action.
#
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

import jwt
from pydantic import BaseModel

from private_booking.config import TokenConfig
from private_booking.core.errors import UnauthorizedError
from private_booking.core.models import User
from private_booking.core.utils import generate_id, random_string, utc_now
from private_booking.storage.repositories import UserRepository

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================


class TokenAction(str, Enum):
    """Purposes an action token can be issued for."""

    REGISTER = "register"
    PASSWORD_RESET = "password-reset"


class AccessClaims(BaseModel):
    """Verified access token payload."""
    sub: str
    aud: str
    exp: datetime
    name: str = ""
    email: str = ""
    picture: str | None = None
    scope: str = "user"

    @property
    def is_admin(self) -> bool:
        return "admin" in self.scope.split()


class RefreshClaims(BaseModel):
    """Verified refresh token payload."""
    sub: str
    exp: datetime
    hash: str


class ActionClaims(BaseModel):
    """Verified action token payload."""
    sub: str
    exp: datetime
    action: str


class TokenPair(BaseModel):
    """Access and refresh token pair."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until access token expires


# =============================================================================
# Errors
# =============================================================================


class TokenError(UnauthorizedError):
    """Base exception for token errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Token is invalid, malformed, or issued for another purpose."""
    pass


# =============================================================================
# Service
# =============================================================================


class TokenService:
    """
    Mints and verifies tokens.

    Refresh tokens need the user repository: issuing one persists the new
    hash on the user, which is what invalidates the previous token.
    """

    def __init__(self, config: TokenConfig, users: UserRepository | None = None):
        self.config = config
        self.users = users

    # -------------------------------------------------------------------------
    # Encoding
    # -------------------------------------------------------------------------

    def _encode(self, claims: dict[str, Any], lifespan: int) -> str:
        now = utc_now()
        payload = {
            **claims,
            "iat": now,
            "exp": now + timedelta(seconds=lifespan),
            "jti": generate_id("tok"),
        }
        return jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)

    def _decode(self, token: str, require: list[str], audience: str | None = None) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                audience=audience,
                options={"require": ["exp", "sub", *require]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {e}")

    # -------------------------------------------------------------------------
    # Access tokens
    # -------------------------------------------------------------------------

    def issue_access_token(self, user: User) -> str:
        claims = {
            "sub": user.id,
            "aud": self.config.audience,
            "name": user.name,
            "email": user.email,
            "picture": user.profile_image,
            "scope": "user admin" if user.is_admin else "user",
        }
        return self._encode(claims, self.config.access_token_lifespan)

    def verify_access_token(self, token: str) -> AccessClaims:
        """Signature, expiry and audience checks."""
        payload = self._decode(token, require=["aud"], audience=self.config.audience)
        return AccessClaims(
            **{**payload, "exp": datetime.fromtimestamp(payload["exp"], tz=timezone.utc)}
        )

    # -------------------------------------------------------------------------
    # Refresh tokens
    # -------------------------------------------------------------------------

    async def issue_refresh_token(self, user: User) -> str:
        """
        Rotate the user's refresh hash and sign a token embedding it.

        Every previously issued refresh token for this user stops
        verifying once the new hash is saved.
        """
        user.refresh_token_hash = random_string(self.config.refresh_hash_length)
        if self.users is not None:
            await self.users.save(user)
        logger.debug(f"Refresh token rotated for {user.id}")
        return self._encode(
            {"sub": user.id, "hash": user.refresh_token_hash},
            self.config.refresh_token_lifespan,
        )

    def decode_refresh_token(self, token: str) -> RefreshClaims:
        """Signature and expiry checks only; see verify_refresh_token."""
        payload = self._decode(token, require=["hash"])
        return RefreshClaims(
            sub=payload["sub"],
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            hash=payload["hash"],
        )

    def verify_refresh_token(self, token: str, user: User) -> RefreshClaims:
        """Signature, expiry, and match against the user's current hash."""
        claims = self.decode_refresh_token(token)
        if claims.sub != user.id:
            raise TokenInvalidError("Refresh token issued for another user")
        if user.refresh_token_hash is None or claims.hash != user.refresh_token_hash:
            raise TokenInvalidError("Unrecognized refresh token")
        return claims

    async def revoke_refresh_tokens(self, user: User) -> None:
        """Invalidate every refresh token issued to `user`."""
        user.refresh_token_hash = None
        if self.users is not None:
            await self.users.save(user)
        logger.debug(f"Refresh tokens revoked for {user.id}")

    # -------------------------------------------------------------------------
    # Action tokens
    # -------------------------------------------------------------------------

    def issue_action_token(self, user: User, action: TokenAction | str) -> str:
        action = TokenAction(action)
        lifespan = self.config.action_token_lifespans[action.value]
        return self._encode({"sub": user.id, "action": action.value}, lifespan)

    def verify_action_token(self, token: str, expected_action: TokenAction | str) -> ActionClaims:
        """Signature, expiry, and action match."""
        payload = self._decode(token, require=["action"])
        if payload["action"] != TokenAction(expected_action).value:
            raise TokenInvalidError("Unrecognized action token")
        return ActionClaims(
            sub=payload["sub"],
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            action=payload["action"],
        )

    # -------------------------------------------------------------------------
    # Pairs
    # -------------------------------------------------------------------------

    async def issue_token_pair(self, user: User) -> TokenPair:
        """Access token plus a freshly rotated refresh token."""
        return TokenPair(
            access_token=self.issue_access_token(user),
            refresh_token=await self.issue_refresh_token(user),
            expires_in=self.config.access_token_lifespan - 1,
        )
