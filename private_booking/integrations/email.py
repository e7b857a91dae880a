# =============================================================================
# Email Delivery Integration (AWS SES)
# =============================================================================
#
# Setup:
#   1. Verify your sending address in the AWS SES console
#   2. Set env vars:
#      - MAIL_FROM_NAME=Private Booking
#      - MAIL_FROM_ADDRESS=noreply@yourdomain.com
#      - AWS_ACCESS_KEY_ID=...
#      - AWS_SECRET_ACCESS_KEY=...
#      - AWS_REGION=us-east-1
#
# Without SES credentials mails are only logged (development).
# Failures are raised to the caller as MailDeliveryError and never retried.
#
# =============================================================================

from __future__ import annotations

import asyncio
import html
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from private_booking.config import Settings
from private_booking.core.errors import MailDeliveryError
from private_booking.core.utils import utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Templates
# =============================================================================

LAYOUT = """
<html>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
<div>
{content}
</div>
</body>
</html>
"""

CALL_TO_ACTION = """
<p style="text-align: center; margin: 30px 0;">
    <a href="{url}" style="background: #4A90A4; color: white; padding: 12px 30px; text-decoration: none; border-radius: 6px; display: inline-block;">
        {label}
    </a>
</p>
<p style="color: #666; font-size: 14px;">Or copy this link: {url}</p>
"""


def dress_html(content: str) -> str:
    """Wrap `content` in the common mail body."""
    return LAYOUT.format(content=content)


# =============================================================================
# Email Service
# =============================================================================


OUTBOX_SIZE = 50


@dataclass
class SentMail:
    """Record of a mail handed to the transport (or logged)."""
    to: str
    subject: str
    html: str
    sent_at: datetime = field(default_factory=utc_now)
    delivered: bool = False


class EmailService:
    """Send emails via AWS SES."""

    def __init__(self, settings: Settings, client: Any = None):
        self.settings = settings
        self._client = client
        # Most recent mails handed to send_mail, for debugging and tests
        self.outbox: deque[SentMail] = deque(maxlen=OUTBOX_SIZE)

    @property
    def client(self):
        """Lazy-load SES client."""
        if self._client is None and self.settings.use_ses:
            self._client = boto3.client(
                "ses",
                region_name=self.settings.aws_region,
                aws_access_key_id=self.settings.aws_access_key_id,
                aws_secret_access_key=self.settings.aws_secret_access_key,
            )
        return self._client

    @property
    def is_configured(self) -> bool:
        """Check if email sending is properly configured."""
        return self._client is not None or self.settings.use_ses

    async def send_mail(self, to: str, subject: str, body: str) -> SentMail:
        """
        Send an HTML mail.

        Args:
            to: Recipient email address
            subject: Subject line
            body: HTML content, wrapped in the common layout

        Raises:
            MailDeliveryError: SES rejected or could not be reached
        """
        mail = SentMail(to=to, subject=subject, html=dress_html(body))
        self.outbox.append(mail)

        if not self.is_configured:
            logger.warning(f"Email not configured - would send '{subject}' to {to}")
            logger.debug(f"Email content: {mail.html}")
            return mail

        try:
            response = await asyncio.to_thread(
                self.client.send_email,
                Source=self.settings.mail_sender,
                Destination={"ToAddresses": [to]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Html": {"Data": mail.html, "Charset": "UTF-8"}},
                },
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            raise MailDeliveryError() from e

        mail.delivered = True
        logger.info(f"Email sent to {to}: {subject} (MessageId: {response['MessageId']})")
        return mail

    async def send_mail_with_call_to_action(
        self,
        to: str,
        subject: str,
        body: str,
        action: str,
        action_url: str,
    ) -> SentMail:
        """Send `body` followed by a link button labelled `action`."""
        button = CALL_TO_ACTION.format(
            url=html.escape(action_url, quote=True),
            label=html.escape(action),
        )
        return await self.send_mail(to, subject, body + button)
