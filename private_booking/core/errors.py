"""
Error taxonomy.

Core operations raise these; the HTTP boundary (api/app.py) maps each
kind to a status code and a response body.
"""

from __future__ import annotations

from pydantic import BaseModel


class FieldError(BaseModel):
    """A single field-level validation failure."""
    message: str
    type: str = "required"
    path: str


class AppError(Exception):
    """Base exception for expected application errors."""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthorizedError(AppError):
    """Identity could not be established (missing, bad or expired credentials)."""
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    """Identity is known but lacks rights on the resource."""
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    """Referenced resource does not exist."""
    status_code = 404
    default_message = "Not found"


class ValidationError(AppError):
    """Required-field, uniqueness or immutability violations."""

    status_code = 422
    default_message = "Validation failed"

    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        super().__init__("; ".join(e.message for e in errors))

    @classmethod
    def single(cls, path: str, message: str, type: str = "required") -> ValidationError:
        return cls([FieldError(message=message, type=type, path=path)])


class MailDeliveryError(AppError):
    """Outbound mail could not be delivered."""
    default_message = "Unable to send email"
