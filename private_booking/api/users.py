"""
User routes: the caller's profile, administration, and item membership.

Responses go through UserResponse so credential hashes never leave the
service.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, EmailStr, Field

from private_booking.auth.context import AuthContext
from private_booking.auth.policies import (
    ADMIN,
    CAN_INVITE,
    CAN_UNREGISTER,
    ITEM_MANAGER,
    load_actor,
    load_item,
    load_me,
    load_target_user,
    require,
)
from private_booking.core.errors import ValidationError
from private_booking.core.models import Item, User
from private_booking.dependencies import get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])
members_router = APIRouter(prefix="/api/items/{slug}/users", tags=["users"])


# =============================================================================
# Response Models
# =============================================================================


class UserResponse(BaseModel):
    """Public view of a user."""

    model_config = {"from_attributes": True}

    id: str
    email: str
    name: str
    profile_image: str | None = None
    is_admin: bool = False
    is_registered: bool = False
    items: list[str] = Field(default_factory=list)
    created_at: datetime


class MemberResponse(UserResponse):
    """A user seen from one of the items they belong to."""

    is_manager: bool = False
    is_owner: bool = False

    @classmethod
    def for_item(cls, user: User, item: Item) -> MemberResponse:
        return cls.model_validate(user).model_copy(update={
            "is_manager": user.id in item.managers,
            "is_owner": user.id == item.owner,
        })


class InviteResponse(BaseModel):
    user: UserResponse
    created: bool
    granted_access: bool
    granted_manager: bool
    notified: bool


# =============================================================================
# Request Models
# =============================================================================


class UpdateMeRequest(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    profile_image: str | None = None
    password: str | None = Field(default=None, min_length=8, max_length=72)


class AdminUpdateUserRequest(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    profile_image: str | None = None
    password: str | None = Field(default=None, min_length=8, max_length=72)
    is_admin: bool | None = None


class InviteRequest(BaseModel):
    email: EmailStr
    manager: bool = False


def apply_profile_update(user: User, data: BaseModel) -> None:
    """Apply sent fields; name and email cannot be blanked."""
    for name in data.model_fields_set - {"password"}:
        value = getattr(data, name)
        if value is None or (name in ("name", "email") and not value):
            continue
        setattr(user, name, value)


# =============================================================================
# Current User
# =============================================================================


@router.get("/me", response_model=UserResponse)
async def get_me(ctx: AuthContext = Depends(require(load=[load_me()]))):
    return UserResponse.model_validate(ctx.user)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    data: UpdateMeRequest,
    ctx: AuthContext = Depends(require(load=[load_me()])),
    services=Depends(get_services),
):
    user = ctx.user
    apply_profile_update(user, data)
    if data.password:
        user.set_password(data.password, rounds=services.settings.bcrypt_rounds)

    await services.users.save(user)
    return UserResponse.model_validate(user)


# =============================================================================
# Administration
# =============================================================================


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    data: AdminUpdateUserRequest,
    ctx: AuthContext = Depends(require(ADMIN, load=[load_target_user(), load_actor()])),
    services=Depends(get_services),
):
    user = ctx.target_user
    apply_profile_update(user, data)
    if data.password:
        user.set_password(data.password, rounds=services.settings.bcrypt_rounds)
    await services.users.save(user)

    logger.info(f"User {user.id} updated by administrator {ctx.user_id}")
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    ctx: AuthContext = Depends(require(ADMIN, load=[load_target_user(), load_actor()])),
    services=Depends(get_services),
):
    """
    Delete a user.

    Users who still own items are kept: their items would lose their owner.
    """
    user = ctx.target_user
    if await services.items.owned_by(user.id):
        raise ValidationError.single("items", "User still owns items.", type="owned")

    for item in await services.items.managed_by(user.id):
        item.managers.remove(user.id)
        await services.items.save(item)

    await services.users.delete(user.id)
    logger.info(f"User {user.id} deleted by administrator {ctx.user_id}")
    return Response(status_code=204)


# =============================================================================
# Item Members
# =============================================================================


@members_router.get("", response_model=list[MemberResponse])
async def list_members(
    ctx: AuthContext = Depends(require(ITEM_MANAGER, load=[load_item()])),
    services=Depends(get_services),
):
    users = await services.users.with_access_to(ctx.item.id)
    return [MemberResponse.for_item(user, ctx.item) for user in users]


@members_router.post("", response_model=InviteResponse)
async def invite_member(
    data: InviteRequest,
    ctx: AuthContext = Depends(require(CAN_INVITE, load=[load_item()])),
    services=Depends(get_services),
):
    """
    Invite someone by email.

    Unknown emails get an account to complete through the mailed
    register link. Repeating an invitation changes nothing.
    """
    result = await services.relationships.invite(ctx.item, data.email, as_manager=data.manager)
    return InviteResponse(
        user=UserResponse.model_validate(result.user),
        created=result.created,
        granted_access=result.granted_access,
        granted_manager=result.granted_manager,
        notified=result.notified,
    )


@members_router.delete("/{user_id}", status_code=204)
async def unregister_member(
    ctx: AuthContext = Depends(require(
        CAN_UNREGISTER, load=[load_item(), load_target_user()],
    )),
    services=Depends(get_services),
):
    """Remove a user from the item. Managers may remove anyone but the owner."""
    await services.relationships.unregister(ctx.item, ctx.target_user, ctx.user_id)
    return Response(status_code=204)
