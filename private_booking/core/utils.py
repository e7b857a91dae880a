"""
Shared utility functions for the booking platform.

This module contains common utilities used across the codebase.
"""

from __future__ import annotations

import secrets
import string
import uuid
from datetime import datetime, timezone

ALPHANUMERIC = string.ascii_letters + string.digits


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.

    Args:
        prefix: Optional prefix (e.g., "user", "item", "book")

    Returns:
        A unique ID like "item_a1b2c3d4e5f6"
    """
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def random_string(length: int) -> str:
    """Random string of `length` characters in [a-zA-Z0-9]."""
    return "".join(secrets.choice(ALPHANUMERIC) for _ in range(length))


def normalize_email(email: str) -> str:
    return email.strip().lower()
