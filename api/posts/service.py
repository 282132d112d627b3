"""
Post business logic.

Scope:
- create / fetch / delete posts, with owner checks
- likes as a membership set (add, remove, toggle)
- replies as append-only snapshots of the replying user
- feed of posts from followed users, newest first
"""

from __future__ import annotations

import logging
from typing import Any

from auth.schemas import CallerIdentity
from core.errors import Forbidden, NotFound, service_boundary
from core.store import Store

from . import schemas

logger = logging.getLogger(__name__)


async def _require_post(store: Store, post_id: str) -> dict[str, Any]:
    post = await store.posts.get_by_id(post_id)
    if post is None:
        raise NotFound("Post not found.")
    return post


@service_boundary
async def create_post(
    store: Store,
    payload: schemas.CreatePostRequest,
    caller: CallerIdentity,
) -> schemas.PostOut:
    author = await store.users.get_by_id(payload.posted_by)
    if author is None:
        raise NotFound("User not found.")
    if str(author["id"]) != caller.id:
        raise Forbidden("Unauthorized to create a post.")

    row = await store.posts.create(posted_by=caller.id, text=payload.text, img=payload.img)
    logger.info("User %s created post %s", caller.id, row["id"])
    return schemas.PostOut.from_row(row)


@service_boundary
async def get_post(store: Store, post_id: str) -> schemas.PostOut:
    return schemas.PostOut.from_row(await _require_post(store, post_id))


@service_boundary
async def delete_post(store: Store, post_id: str, caller: CallerIdentity) -> None:
    post = await _require_post(store, post_id)
    if str(post["posted_by"]) != caller.id:
        raise Forbidden("You are not allowed to delete this post.")

    if not await store.posts.delete(post_id):
        raise NotFound("Post not found.")
    logger.info("User %s deleted post %s", caller.id, post_id)


@service_boundary
async def like_post(store: Store, post_id: str, caller: CallerIdentity) -> None:
    await _require_post(store, post_id)
    await store.posts.add_like(post_id, caller.id)


@service_boundary
async def unlike_post(store: Store, post_id: str, caller: CallerIdentity) -> None:
    await _require_post(store, post_id)
    await store.posts.remove_like(post_id, caller.id)


@service_boundary
async def like_unlike(store: Store, post_id: str, caller: CallerIdentity) -> dict[str, Any]:
    post = await _require_post(store, post_id)
    if caller.id in post["likes"]:
        await unlike_post(store, post_id, caller)
        return {"message": "Post unliked successfully.", "liked": False}

    await like_post(store, post_id, caller)
    return {"message": "Post liked successfully.", "liked": True}


@service_boundary
async def reply_to_post(
    store: Store,
    post_id: str,
    caller: CallerIdentity,
    payload: schemas.ReplyRequest,
) -> schemas.PostOut:
    await _require_post(store, post_id)

    # Snapshot of the replier as of now; later profile edits do not touch it.
    reply = schemas.Reply(
        user_id=caller.id,
        text=payload.text,
        username=caller.username,
        user_profile_pic=caller.profile_pic,
    )
    updated = await store.posts.append_reply(post_id, reply.model_dump())
    if updated is None:
        raise NotFound("Post not found.")
    return schemas.PostOut.from_row(updated)


@service_boundary
async def feed(store: Store, caller: CallerIdentity) -> list[schemas.PostOut]:
    user = await store.users.get_by_id(caller.id)
    if user is None:
        raise NotFound("User not found.")

    following = [str(x) for x in user.get("following") or []]
    if not following:
        return []
    rows = await store.posts.list_by_authors(following)
    return [schemas.PostOut.from_row(r) for r in rows]
