"""HTTP API."""

from private_booking.api.app import create_app

__all__ = ["create_app"]
