"""
Account notifications.

Mails sent on behalf of the relationship and password flows. Links that
need an action token get one minted here.
"""

from __future__ import annotations

import html
import logging

from private_booking.auth.tokens import TokenAction, TokenService
from private_booking.config import Settings
from private_booking.core.models import Item, User
from private_booking.integrations.email import EmailService, SentMail

logger = logging.getLogger(__name__)


class AccountNotifier:
    """
    Composes mail content and links.

    This is where subjects, wording and URLs live; the EmailService only
    delivers.
    """

    def __init__(self, settings: Settings, email: EmailService, tokens: TokenService):
        self.settings = settings
        self.email = email
        self.tokens = tokens

    def _url(self, path: str) -> str:
        return f"{self.settings.app_url.rstrip('/')}{path}"

    async def send_registration_invite(self, user: User, item: Item) -> SentMail:
        """Invite an unregistered user to complete their registration."""
        token = self.tokens.issue_action_token(user, TokenAction.REGISTER)
        logger.info(f"Sending registration invite to {user.id} for {item.slug}")
        return await self.email.send_mail_with_call_to_action(
            user.email,
            f"You have been invited to {item.name}",
            f"<p>You have been invited to join <strong>{html.escape(item.name)}</strong>.</p>"
            "<p>Complete your registration to start booking.</p>",
            "Complete registration",
            self._url(f"/register?token={token}"),
        )

    async def send_new_access(self, user: User, item: Item) -> SentMail:
        """Tell a registered user they can now access `item`."""
        logger.info(f"Sending new access notice to {user.id} for {item.slug}")
        return await self.email.send_mail_with_call_to_action(
            user.email,
            f"You now have access to {item.name}",
            f"<p>You now have access to <strong>{html.escape(item.name)}</strong>.</p>",
            "Open",
            self._url(f"/items/{item.slug}"),
        )

    async def send_password_reset(self, user: User) -> SentMail:
        token = self.tokens.issue_action_token(user, TokenAction.PASSWORD_RESET)
        logger.info(f"Sending password reset to {user.id}")
        return await self.email.send_mail_with_call_to_action(
            user.email,
            "Reset your password",
            "<p>We received a request to reset your password.</p>"
            "<p>If you didn't request this, you can safely ignore this email.</p>",
            "Reset password",
            self._url(f"/reset-password?token={token}"),
        )
