# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /auth/login                  - Email + password, get tokens
#   POST /auth/refresh-token          - Rotate the refresh token
#   POST /auth/logout                 - Revoke refresh tokens
#   POST /auth/register               - Complete an invitation (register token)
#   POST /auth/request-password-reset - Mail a reset link
#   POST /auth/reset-password         - Set a new password (reset token)
#   POST /auth/session-token          - Tokens for a browser session
#
# Web (browser session):
#   POST /login                       - Form login, sets session cookie
#   POST /logout                      - Clear the session
#
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, EmailStr, Field

from private_booking.auth.context import AuthContext
from private_booking.auth.policies import load_actor, require, require_auth
from private_booking.auth.strategies import (
    SESSION_USER_KEY,
    ActionTokenAuth,
    LocalCredentialAuth,
    RefreshTokenAuth,
    SessionAuth,
)
from private_booking.auth.tokens import TokenAction, TokenPair
from private_booking.core.errors import UnauthorizedError
from private_booking.dependencies import get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
web_router = APIRouter(tags=["web"])

PASSWORD_RESET_MESSAGE = "If this email is registered, a reset link has been sent."


# =============================================================================
# Request/Response Models
# =============================================================================

class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    password: str = Field(min_length=8, max_length=72)


class PasswordResetRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: str = Field(min_length=8, max_length=72)


class MessageResponse(BaseModel):
    message: str


# =============================================================================
# Token Endpoints
# =============================================================================

@router.post("/login", response_model=TokenPair)
async def login(
    ctx: AuthContext = Depends(require(auth=LocalCredentialAuth(source="json"))),
    services=Depends(get_services),
):
    """Authenticate with email and password."""
    logger.info(f"Login: {ctx.user_id}")
    return await services.tokens.issue_token_pair(ctx.user)


@router.post("/refresh-token", response_model=TokenPair)
async def refresh_token(
    ctx: AuthContext = Depends(require_auth(RefreshTokenAuth())),
    services=Depends(get_services),
):
    """
    Exchange a refresh token for a new pair.

    The presented refresh token stops working once the new one is issued.
    """
    return await services.tokens.issue_token_pair(ctx.user)


@router.post("/logout", status_code=204)
async def logout(
    ctx: AuthContext = Depends(require(load=[load_actor()])),
    services=Depends(get_services),
):
    """Revoke every refresh token of the caller."""
    if ctx.user is not None:
        await services.tokens.revoke_refresh_tokens(ctx.user)
    logger.info(f"Logout: {ctx.user_id}")
    return Response(status_code=204)


@router.post("/session-token", response_model=TokenPair)
async def session_token(
    ctx: AuthContext = Depends(require_auth(SessionAuth())),
    services=Depends(get_services),
):
    """Token pair for a browser that logged in through the web form."""
    return await services.tokens.issue_token_pair(ctx.user)


# =============================================================================
# Action Token Endpoints
# =============================================================================

@router.post("/register", response_model=TokenPair)
async def register(
    data: RegisterRequest,
    ctx: AuthContext = Depends(require_auth(ActionTokenAuth(TokenAction.REGISTER))),
    services=Depends(get_services),
):
    """
    Complete the account of an invited user.

    The bearer token is the register token from the invitation mail.
    """
    user = ctx.user
    user.name = data.name
    user.set_password(data.password, rounds=services.settings.bcrypt_rounds)
    await services.users.save(user)

    logger.info(f"Registered: {user.id}")
    return await services.tokens.issue_token_pair(user)


@router.post("/request-password-reset", response_model=MessageResponse)
async def request_password_reset(data: PasswordResetRequest, services=Depends(get_services)):
    """
    Mail a password reset link.

    Answers the same whether or not the email is known.
    """
    user = await services.users.find_by_email(data.email)
    if user is not None:
        await services.notifier.send_password_reset(user)
    else:
        logger.info("Password reset requested for an unknown email")

    return MessageResponse(message=PASSWORD_RESET_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    data: ResetPasswordRequest,
    ctx: AuthContext = Depends(require_auth(ActionTokenAuth(TokenAction.PASSWORD_RESET))),
    services=Depends(get_services),
):
    """Set a new password and sign out every other device."""
    user = ctx.user
    user.set_password(data.password, rounds=services.settings.bcrypt_rounds)
    # persists the new password hash along with the cleared refresh hash
    await services.tokens.revoke_refresh_tokens(user)

    logger.info(f"Password reset: {user.id}")
    return MessageResponse(message="Password updated")


# =============================================================================
# Web Login (session cookie)
# =============================================================================

@web_router.post("/login")
async def web_login(request: Request):
    """
    Form login for the server-rendered client.

    Success stores the user id in the session and redirects to `/`;
    failure redirects back to the login page.
    """
    try:
        actor = await LocalCredentialAuth(source="form").authenticate(request)
    except UnauthorizedError:
        return RedirectResponse("/login?error=1", status_code=303)

    request.session[SESSION_USER_KEY] = actor.user_id
    logger.info(f"Web login: {actor.user_id}")
    return RedirectResponse("/", status_code=303)


@web_router.post("/logout")
async def web_logout(request: Request):
    request.session.clear()
    return RedirectResponse("/login", status_code=303)
