"""
Relationship mutators.

User.items and Item.managers describe the same many-to-many relation
from both sides. Each operation saves the user first and the item
second: two single-document writes, not a transaction. A failure or a
concurrent write between them can leave the relation asymmetric; this
is a known limitation of the store, not something these methods hide.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from private_booking.auth.permissions import can_unregister_user
from private_booking.config import Settings
from private_booking.core.errors import ForbiddenError
from private_booking.core.models import Item, User
from private_booking.core.utils import normalize_email
from private_booking.services.notifications import AccountNotifier
from private_booking.storage.repositories import ItemRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass
class InviteResult:
    """Outcome of an invitation."""

    user: User
    created: bool = False
    granted_access: bool = False
    granted_manager: bool = False
    notified: bool = False

    @property
    def changed(self) -> bool:
        return self.created or self.granted_access or self.granted_manager


class RelationshipService:
    """Invite users to items and remove them again."""

    def __init__(
        self,
        settings: Settings,
        users: UserRepository,
        items: ItemRepository,
        notifier: AccountNotifier,
    ):
        self.settings = settings
        self.users = users
        self.items = items
        self.notifier = notifier

    async def invite(self, item: Item, email: str, as_manager: bool = False) -> InviteResult:
        """
        Give the user with `email` access to `item`, optionally as manager.

        Unknown emails get an unregistered placeholder user. Calling this
        again with the same arguments changes nothing and sends nothing.
        """
        email = normalize_email(email)
        user = await self.users.find_by_email(email)
        if user is None:
            result = InviteResult(user=User(email=email, name=email.split("@")[0]), created=True)
        else:
            result = InviteResult(user=user)
        user = result.user

        result.granted_access = not user.has_access(item.id)
        result.granted_manager = as_manager and user.id not in item.managers

        if not result.changed:
            logger.debug(f"Invite of {user.id} to {item.slug} changed nothing")
            return result

        # Mail goes out before anything is touched, so a failed delivery
        # leaves no state behind and the same invite can be retried.
        if user.is_registered:
            await self.notifier.send_new_access(user, item)
        else:
            await self.notifier.send_registration_invite(user, item)
        result.notified = True

        if result.granted_access:
            user.items.append(item.id)
        await self.users.save(user)
        if result.granted_manager:
            item.managers.append(user.id)
            await self.items.save(item)

        logger.info(
            f"Invited {user.id} to {item.slug} "
            f"(access={result.granted_access}, manager={result.granted_manager})"
        )
        return result

    async def unregister(self, item: Item, target: User, actor_id: str) -> None:
        """
        Remove `target`'s access to `item` and their manager role on it.

        Raises:
            ForbiddenError: `actor_id` may not unregister `target`
        """
        if not can_unregister_user(item, target.id, actor_id):
            raise ForbiddenError("Cannot unregister this user")

        if item.id in target.items:
            target.items.remove(item.id)
            await self.users.save(target)

        if target.id in item.managers:
            item.managers.remove(target.id)
            await self.items.save(item)

        logger.info(f"Unregistered {target.id} from {item.slug} (by {actor_id})")
