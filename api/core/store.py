"""
Persistence handle passed into every service call.

`Store` groups one user store and one post store. Both have a PostgreSQL
implementation (`users.repository`, `posts.repository`) and an in-memory one
used for local development and tests. Rows travel as plain dicts with
snake_case keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from fastapi import Request


class UserStore(Protocol):
    async def get_by_id(self, user_id: str) -> dict[str, Any] | None: ...

    async def get_by_username(self, username: str) -> dict[str, Any] | None: ...

    async def get_by_email(self, email: str) -> dict[str, Any] | None: ...

    async def find_by_email_or_username(self, *, email: str, username: str) -> dict[str, Any] | None: ...

    async def create(
        self,
        *,
        name: str,
        username: str,
        email: str,
        password_hash: str,
    ) -> dict[str, Any]: ...

    async def update(self, user_id: str, fields: dict[str, Any]) -> dict[str, Any] | None: ...

    async def follow(self, follower_id: str, target_id: str) -> None: ...

    async def unfollow(self, follower_id: str, target_id: str) -> None: ...


class PostStore(Protocol):
    async def get_by_id(self, post_id: str) -> dict[str, Any] | None: ...

    async def create(
        self,
        *,
        posted_by: str,
        text: str,
        img: str | None = None,
        created_at: datetime | None = None,
    ) -> dict[str, Any]: ...

    async def delete(self, post_id: str) -> bool: ...

    async def add_like(self, post_id: str, user_id: str) -> None: ...

    async def remove_like(self, post_id: str, user_id: str) -> None: ...

    async def append_reply(self, post_id: str, reply: dict[str, Any]) -> dict[str, Any] | None: ...

    async def list_by_authors(self, author_ids: list[str]) -> list[dict[str, Any]]: ...


@dataclass(frozen=True)
class Store:
    users: UserStore
    posts: PostStore


def get_store(request: Request) -> Store:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Store is not initialized. It is created in the app lifespan.")
    return store
