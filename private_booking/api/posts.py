"""
Post routes: the message feed of an item.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from private_booking.auth.context import AuthContext
from private_booking.auth.policies import (
    ITEM_ACCESS,
    POST_AUTHOR,
    POST_DELETER,
    load_actor,
    load_item,
    load_post,
    require,
)
from private_booking.core.models import Post
from private_booking.dependencies import get_services

router = APIRouter(prefix="/api/items/{slug}/posts", tags=["posts"])


class CreatePostRequest(BaseModel):
    message: str = Field(min_length=1)
    images: list[str] = Field(default_factory=list)


class UpdatePostRequest(BaseModel):
    message: str | None = None
    images: list[str] | None = None


@router.get("", response_model=list[Post])
async def list_posts(
    ctx: AuthContext = Depends(require(ITEM_ACCESS, load=[load_item(), load_actor()])),
    services=Depends(get_services),
):
    """Newest first."""
    posts = await services.posts.for_item(ctx.item.id)
    return sorted(posts, key=lambda p: p.created_at, reverse=True)


@router.post("", response_model=Post, status_code=201)
async def create_post(
    data: CreatePostRequest,
    ctx: AuthContext = Depends(require(ITEM_ACCESS, load=[load_item(), load_actor()])),
    services=Depends(get_services),
):
    post = Post(
        message=data.message,
        images=data.images,
        author=ctx.user_id,
        item=ctx.item.id,
    )
    return await services.posts.save(post)


@router.get("/{post_id}", response_model=Post)
async def get_post(
    ctx: AuthContext = Depends(require(
        ITEM_ACCESS, load=[load_item(), load_post(), load_actor()],
    )),
):
    return ctx.post


@router.patch("/{post_id}", response_model=Post)
async def update_post(
    data: UpdatePostRequest,
    ctx: AuthContext = Depends(require(POST_AUTHOR, load=[load_item(), load_post()])),
    services=Depends(get_services),
):
    post = ctx.post
    if data.message:
        post.message = data.message
    if data.images is not None:
        post.images = data.images
    return await services.posts.save(post)


@router.delete("/{post_id}", status_code=204)
async def delete_post(
    ctx: AuthContext = Depends(require(POST_DELETER, load=[load_item(), load_post()])),
    services=Depends(get_services),
):
    await services.posts.delete(ctx.post.id)
    return Response(status_code=204)
