"""
Item routes, with the infos and places each item owns.

Every route here runs behind an access token. Guards resolve the item
from its slug (404) before any permission check (403).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, Field

from private_booking.auth.context import AuthContext
from private_booking.auth.policies import (
    ITEM_ACCESS,
    ITEM_DELETER,
    ITEM_MANAGER,
    load_actor,
    load_item,
    load_me,
    require,
)
from private_booking.core.models import Address, Info, Item, Place
from private_booking.dependencies import get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/items", tags=["items"])


# =============================================================================
# Request Models
# =============================================================================


class CreateItemRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    address: Address = Field(default_factory=Address)
    images: list[str] = Field(default_factory=list)
    equipments: list[str] = Field(default_factory=list)


class UpdateItemRequest(BaseModel):
    """
    Partial item update.

    name, slug and owner are accepted so that a changed value is
    reported as an immutable-field error rather than silently dropped.
    """
    name: str | None = None
    slug: str | None = None
    owner: str | None = None
    description: str | None = None
    address: Address | None = None
    images: list[str] | None = None
    equipments: list[str] | None = None


class InfoRequest(BaseModel):
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)
    image: str | None = None


class InfoUpdate(BaseModel):
    title: str | None = None
    message: str | None = None
    image: str | None = None


class PlaceRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    type: str | None = None


class PlaceUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    type: str | None = None


# =============================================================================
# Loaders
# =============================================================================


def require_entry(kind: str, param: str):
    """Loader checking that the item holds the info/place named by `param`."""
    async def loader(ctx: AuthContext, request: Request, services) -> None:
        getattr(ctx.item, f"get_{kind}")(request.path_params[param])
    return loader


def apply_update(target: BaseModel, data: BaseModel, required: tuple[str, ...] = ()) -> None:
    """Copy fields the client sent; empty values never clear `required` fields."""
    for name in data.model_fields_set:
        value = getattr(data, name)
        if name in required and not value:
            continue
        setattr(target, name, value)


# =============================================================================
# Items
# =============================================================================


@router.get("", response_model=list[Item])
async def list_items(
    ctx: AuthContext = Depends(require(load=[load_me()])),
    services=Depends(get_services),
):
    """Items the caller has access to; every item for administrators."""
    if ctx.is_admin:
        return await services.items.find()

    items = [await services.items.get(item_id) for item_id in ctx.user.items]
    return [item for item in items if item is not None]


@router.post("", response_model=Item, status_code=201)
async def create_item(
    data: CreateItemRequest,
    ctx: AuthContext = Depends(require(load=[load_me()])),
    services=Depends(get_services),
):
    """Create an item. The caller becomes its owner and first manager."""
    item = await services.items.create(ctx.user, **data.model_dump())

    ctx.user.items.append(item.id)
    await services.users.save(ctx.user)
    return item


@router.get("/{slug}", response_model=Item)
async def get_item(
    ctx: AuthContext = Depends(require(ITEM_ACCESS, load=[load_item(), load_actor()])),
):
    return ctx.item


@router.patch("/{slug}", response_model=Item)
async def update_item(
    data: UpdateItemRequest,
    ctx: AuthContext = Depends(require(ITEM_MANAGER, load=[load_item()])),
    services=Depends(get_services),
):
    item = ctx.item
    for name in data.model_fields_set - {"address"}:
        value = getattr(data, name)
        if value is not None:
            setattr(item, name, value)

    # Address parts are patched one by one
    if data.address is not None:
        item.address = item.address.model_copy(
            update=data.address.model_dump(exclude_unset=True)
        )

    return await services.items.save(item)


@router.delete("/{slug}", status_code=204)
async def delete_item(
    ctx: AuthContext = Depends(require(ITEM_DELETER, load=[load_item(), load_actor()])),
    services=Depends(get_services),
):
    """Delete an item with its bookings and posts, and revoke every access to it."""
    item = ctx.item

    for booking in await services.bookings.for_item(item.id):
        await services.bookings.delete(booking.id)
    for post in await services.posts.for_item(item.id):
        await services.posts.delete(post.id)
    for user in await services.users.with_access_to(item.id):
        user.items.remove(item.id)
        await services.users.save(user)

    await services.items.delete(item.id)
    logger.info(f"Item deleted: {item.slug} (by {ctx.user_id})")
    return Response(status_code=204)


# =============================================================================
# Infos
# =============================================================================


@router.post("/{slug}/infos", response_model=Info, status_code=201)
async def create_info(
    data: InfoRequest,
    ctx: AuthContext = Depends(require(ITEM_MANAGER, load=[load_item()])),
    services=Depends(get_services),
):
    info = Info(**data.model_dump())
    ctx.item.infos.append(info)
    await services.items.save(ctx.item)
    return info


@router.patch("/{slug}/infos/{info_id}", response_model=Info)
async def update_info(
    info_id: str,
    data: InfoUpdate,
    ctx: AuthContext = Depends(require(
        ITEM_MANAGER, load=[load_item(), require_entry("info", "info_id")],
    )),
    services=Depends(get_services),
):
    info = ctx.item.get_info(info_id)
    apply_update(info, data, required=("title", "message"))
    await services.items.save(ctx.item)
    return info


@router.delete("/{slug}/infos/{info_id}", status_code=204)
async def delete_info(
    info_id: str,
    ctx: AuthContext = Depends(require(
        ITEM_MANAGER, load=[load_item(), require_entry("info", "info_id")],
    )),
    services=Depends(get_services),
):
    ctx.item.remove_info(info_id)
    await services.items.save(ctx.item)
    return Response(status_code=204)


# =============================================================================
# Places
# =============================================================================


@router.post("/{slug}/places", response_model=Place, status_code=201)
async def create_place(
    data: PlaceRequest,
    ctx: AuthContext = Depends(require(ITEM_MANAGER, load=[load_item()])),
    services=Depends(get_services),
):
    place = Place(**data.model_dump())
    ctx.item.places.append(place)
    await services.items.save(ctx.item)
    return place


@router.patch("/{slug}/places/{place_id}", response_model=Place)
async def update_place(
    place_id: str,
    data: PlaceUpdate,
    ctx: AuthContext = Depends(require(
        ITEM_MANAGER, load=[load_item(), require_entry("place", "place_id")],
    )),
    services=Depends(get_services),
):
    place = ctx.item.get_place(place_id)
    apply_update(place, data, required=("name", "description"))
    await services.items.save(ctx.item)
    return place


@router.delete("/{slug}/places/{place_id}", status_code=204)
async def delete_place(
    place_id: str,
    ctx: AuthContext = Depends(require(
        ITEM_MANAGER, load=[load_item(), require_entry("place", "place_id")],
    )),
    services=Depends(get_services),
):
    ctx.item.remove_place(place_id)
    await services.items.save(ctx.item)
    return Response(status_code=204)
