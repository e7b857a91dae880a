"""
Booking routes.

Any signed-in user may request a booking. The requester and the item's
managers may then read, update or delete it.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from private_booking.auth.context import AuthContext
from private_booking.auth.permissions import is_item_manager
from private_booking.auth.policies import BOOKING_EDITOR, load_booking, load_item, load_me, require
from private_booking.core.models import Booking
from private_booking.dependencies import get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/items/{slug}/bookings", tags=["bookings"])


class CreateBookingRequest(BaseModel):
    date: datetime
    comment: str = ""


class UpdateBookingRequest(BaseModel):
    # date is immutable; sending a different one is rejected on save
    date: datetime | None = None
    status: str | None = None
    comment: str | None = None


@router.get("", response_model=list[Booking])
async def list_bookings(
    ctx: AuthContext = Depends(require(load=[load_item()])),
    services=Depends(get_services),
):
    """Every booking of the item for managers, the caller's own otherwise."""
    if is_item_manager(ctx.item, ctx.user_id):
        bookings = await services.bookings.for_item(ctx.item.id)
    else:
        bookings = await services.bookings.for_item(ctx.item.id, user_id=ctx.user_id)
    return sorted(bookings, key=lambda b: b.created_at)


@router.post("", response_model=Booking, status_code=201)
async def create_booking(
    data: CreateBookingRequest,
    ctx: AuthContext = Depends(require(load=[load_item(), load_me()])),
    services=Depends(get_services),
):
    booking = Booking(
        date=data.date,
        comment=data.comment,
        item=ctx.item.id,
        user=ctx.user_id,
    )
    await services.bookings.save(booking)
    logger.info(f"Booking {booking.id} requested on {ctx.item.slug} by {ctx.user_id}")
    return booking


@router.get("/{booking_id}", response_model=Booking)
async def get_booking(
    ctx: AuthContext = Depends(require(BOOKING_EDITOR, load=[load_item(), load_booking()])),
):
    return ctx.booking


@router.patch("/{booking_id}", response_model=Booking)
async def update_booking(
    data: UpdateBookingRequest,
    ctx: AuthContext = Depends(require(BOOKING_EDITOR, load=[load_item(), load_booking()])),
    services=Depends(get_services),
):
    booking = ctx.booking
    for name in data.model_fields_set:
        value = getattr(data, name)
        if value is not None:
            setattr(booking, name, value)

    await services.bookings.save(booking)
    logger.info(f"Booking {booking.id} updated by {ctx.user_id} (status={booking.status})")
    return booking


@router.delete("/{booking_id}", status_code=204)
async def delete_booking(
    ctx: AuthContext = Depends(require(BOOKING_EDITOR, load=[load_item(), load_booking()])),
    services=Depends(get_services),
):
    await services.bookings.delete(ctx.booking.id)
    return Response(status_code=204)
