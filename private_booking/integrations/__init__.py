"""
External integrations: outbound mail (AWS SES) and error tracking (Sentry).
"""

from private_booking.integrations.email import EmailService, SentMail
from private_booking.integrations.sentry import capture_exception, init_sentry

__all__ = [
    "EmailService",
    "SentMail",
    "capture_exception",
    "init_sentry",
]
