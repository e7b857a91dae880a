"""
Service container (dependency injection).

Built once at app creation and stored on `app.state.services`. Routes
and guards receive it through `get_services`; tests build their own
with an isolated store and settings.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from private_booking.auth.tokens import TokenService
from private_booking.config import Settings
from private_booking.core.models import User
from private_booking.integrations.email import EmailService
from private_booking.services.notifications import AccountNotifier
from private_booking.services.relationships import RelationshipService
from private_booking.storage.base import MetadataStorage
from private_booking.storage.local import create_local_storage
from private_booking.storage.repositories import (
    BookingRepository,
    ItemRepository,
    PostRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class ServiceContainer(BaseModel):
    """
    Container for every collaborator a request may need.

    Services receive this and use the interfaces without knowing the
    underlying implementation.
    """

    model_config = {"arbitrary_types_allowed": True}

    settings: Settings
    storage: MetadataStorage

    users: UserRepository
    items: ItemRepository
    bookings: BookingRepository
    posts: PostRepository

    tokens: TokenService
    email: EmailService
    notifier: AccountNotifier
    relationships: RelationshipService


def build_services(
    settings: Settings,
    storage: MetadataStorage | None = None,
    email: EmailService | None = None,
) -> ServiceContainer:
    """Wire repositories and services around `storage`."""
    storage = storage or create_local_storage()
    users = UserRepository(storage)
    items = ItemRepository(storage)
    tokens = TokenService(settings.token_config(), users)
    email = email or EmailService(settings)
    notifier = AccountNotifier(settings, email, tokens)

    return ServiceContainer(
        settings=settings,
        storage=storage,
        users=users,
        items=items,
        bookings=BookingRepository(storage),
        posts=PostRepository(storage),
        tokens=tokens,
        email=email,
        notifier=notifier,
        relationships=RelationshipService(settings, users, items, notifier),
    )


async def bootstrap_admin(services: ServiceContainer) -> None:
    """Create or promote the configured administrator."""
    settings = services.settings
    if not (settings.admin_email and settings.admin_password):
        return

    user = await services.users.find_by_email(settings.admin_email)
    if user is None:
        user = User(email=settings.admin_email, name=settings.admin_name)
        user.set_password(settings.admin_password, rounds=settings.bcrypt_rounds)
        logger.info(f"Created administrator {user.email}")
    elif not user.is_admin:
        logger.info(f"Promoted {user.email} to administrator")

    user.is_admin = True
    await services.users.save(user)
