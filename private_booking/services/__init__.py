"""Services - the operations routes delegate to."""

from private_booking.services.notifications import AccountNotifier
from private_booking.services.relationships import InviteResult, RelationshipService
from private_booking.services.container import ServiceContainer, bootstrap_admin, build_services

__all__ = [
    "AccountNotifier",
    "InviteResult",
    "RelationshipService",
    "ServiceContainer",
    "bootstrap_admin",
    "build_services",
]
