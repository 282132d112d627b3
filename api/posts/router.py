"""
Post API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, status

from auth.dependencies import get_current_user
from auth.schemas import CallerIdentity
from core.store import Store, get_store

from . import service, validation

router = APIRouter()


# Registered before "/{post_id}" so "feed" is not read as an id.
@router.get("/feed")
async def feed(
    store: Store = Depends(get_store),
    current_user: CallerIdentity = Depends(get_current_user),
) -> dict:
    posts = await service.feed(store, current_user)
    return {"feedPosts": [p.to_json() for p in posts]}


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_post(
    body: dict[str, Any] = Body(...),
    store: Store = Depends(get_store),
    current_user: CallerIdentity = Depends(get_current_user),
) -> dict:
    payload = validation.validate_create_post(body).unwrap()
    post = await service.create_post(store, payload, current_user)
    return {"message": "Post created successfully.", "post": post.to_json()}


@router.get("/{post_id}")
async def get_post(
    post_id: str,
    store: Store = Depends(get_store),
) -> dict:
    post = await service.get_post(store, post_id)
    return {"post": post.to_json()}


@router.delete("/delete/{post_id}")
async def delete_post(
    post_id: str,
    store: Store = Depends(get_store),
    current_user: CallerIdentity = Depends(get_current_user),
) -> dict:
    await service.delete_post(store, post_id, current_user)
    return {"message": "Post deleted successfully."}


@router.post("/like/{post_id}")
async def like_unlike(
    post_id: str,
    store: Store = Depends(get_store),
    current_user: CallerIdentity = Depends(get_current_user),
) -> dict:
    return await service.like_unlike(store, post_id, current_user)


@router.post("/reply/{post_id}")
async def reply_to_post(
    post_id: str,
    body: dict[str, Any] = Body(...),
    store: Store = Depends(get_store),
    current_user: CallerIdentity = Depends(get_current_user),
) -> dict:
    payload = validation.validate_reply(body).unwrap()
    post = await service.reply_to_post(store, post_id, current_user, payload)
    return {"message": "Reply added successfully.", "post": post.to_json()}
