"""
Core module - fundamental data models and infrastructure.

This module contains:
- models: Core data models (User, Item, Booking, Post)
- errors: Error taxonomy shared by every layer
- slugs: Slug derivation and collision resolution
- passwords: Password hashing
- utils: Shared utility functions
"""

from private_booking.core.models import (
    Address,
    Booking,
    BookingStatus,
    Info,
    Item,
    Place,
    Post,
    User,
)

from private_booking.core.errors import (
    AppError,
    FieldError,
    ForbiddenError,
    MailDeliveryError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

from private_booking.core.slugs import next_available_slug, slugify

from private_booking.core.utils import generate_id, utc_now

__all__ = [
    # Models
    "Address",
    "Booking",
    "BookingStatus",
    "Info",
    "Item",
    "Place",
    "Post",
    "User",
    # Errors
    "AppError",
    "FieldError",
    "ForbiddenError",
    "MailDeliveryError",
    "NotFoundError",
    "UnauthorizedError",
    "ValidationError",
    # Slugs
    "next_available_slug",
    "slugify",
    # Utils
    "generate_id",
    "utc_now",
]
