"""
FastAPI dependencies shared by routers and guards.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from private_booking.services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    """The service container created with the app."""
    return request.app.state.services
