"""
Post persistence.
Likes are a `text[]` of user ids; replies are a jsonb array of snapshots.
"""

from __future__ import annotations

import copy
import itertools
import json
import uuid
from datetime import datetime, timezone
from typing import Any

from core.db import Database, affected_rows

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS posts (
  id text PRIMARY KEY,
  posted_by text NOT NULL REFERENCES users(id),
  text text NOT NULL CHECK (char_length(text) <= 500),
  img text,
  likes text[] NOT NULL DEFAULT '{}',
  replies jsonb NOT NULL DEFAULT '[]'::jsonb,
  created_at timestamptz NOT NULL DEFAULT now(),
  updated_at timestamptz NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS posts_posted_by_created_at_idx
  ON posts (posted_by, created_at DESC);
"""

POST_COLUMNS = "id, posted_by, text, img, likes, replies, created_at, updated_at"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _json_arg(value: dict[str, Any]) -> str:
    """
    asyncpg does not automatically encode Python dicts for json/jsonb parameters.
    We pass JSON as a string and cast to jsonb in SQL.
    """
    return json.dumps(value, ensure_ascii=True)


def _row(row: dict[str, Any] | None) -> dict[str, Any] | None:
    if row is None:
        return None
    replies = row.get("replies")
    # jsonb comes back as text unless a codec is registered.
    if isinstance(replies, str):
        replies = json.loads(replies)
    row["replies"] = list(replies or [])
    row["likes"] = list(row.get("likes") or [])
    return row


async def create_schema(db: Database) -> None:
    await db.execute(SCHEMA_SQL)


class PostgresPostStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def get_by_id(self, post_id: str) -> dict[str, Any] | None:
        return _row(await self.db.fetch_one(f"SELECT {POST_COLUMNS} FROM posts WHERE id = $1", post_id))

    async def create(
        self,
        *,
        posted_by: str,
        text: str,
        img: str | None = None,
        created_at: datetime | None = None,
    ) -> dict[str, Any]:
        created_at = created_at or _utc_now()
        row = await self.db.fetch_one(
            f"""
            INSERT INTO posts (id, posted_by, text, img, created_at, updated_at)
            VALUES ($1, $2, $3, $4, $5, $5)
            RETURNING {POST_COLUMNS}
            """,
            str(uuid.uuid4()),
            posted_by,
            text,
            img,
            created_at,
        )
        if row is None:
            raise RuntimeError("Failed to create post.")
        return _row(row)

    async def delete(self, post_id: str) -> bool:
        status = await self.db.execute("DELETE FROM posts WHERE id = $1", post_id)
        return affected_rows(status) > 0

    async def add_like(self, post_id: str, user_id: str) -> None:
        await self.db.execute(
            """
            UPDATE posts
            SET likes = array_append(likes, $2), updated_at = now()
            WHERE id = $1
              AND NOT ($2 = ANY(likes))
            """,
            post_id,
            user_id,
        )

    async def remove_like(self, post_id: str, user_id: str) -> None:
        await self.db.execute(
            """
            UPDATE posts
            SET likes = array_remove(likes, $2), updated_at = now()
            WHERE id = $1
            """,
            post_id,
            user_id,
        )

    async def append_reply(self, post_id: str, reply: dict[str, Any]) -> dict[str, Any] | None:
        return _row(
            await self.db.fetch_one(
                f"""
                UPDATE posts
                SET replies = replies || jsonb_build_array($2::jsonb), updated_at = now()
                WHERE id = $1
                RETURNING {POST_COLUMNS}
                """,
                post_id,
                _json_arg(reply),
            )
        )

    async def list_by_authors(self, author_ids: list[str]) -> list[dict[str, Any]]:
        if not author_ids:
            return []
        rows = await self.db.fetch_all(
            f"""
            SELECT {POST_COLUMNS}
            FROM posts
            WHERE posted_by = ANY($1::text[])
            ORDER BY created_at DESC, id DESC
            """,
            list(author_ids),
        )
        return [_row(r) for r in rows]


class InMemoryPostStore:
    """Dict-backed post store for development and tests."""

    def __init__(self) -> None:
        self.posts: dict[str, dict[str, Any]] = {}
        # Insertion order breaks ties between equal timestamps.
        self._sequence = itertools.count()
        self._order: dict[str, int] = {}

    async def get_by_id(self, post_id: str) -> dict[str, Any] | None:
        row = self.posts.get(post_id)
        return copy.deepcopy(row) if row is not None else None

    async def create(
        self,
        *,
        posted_by: str,
        text: str,
        img: str | None = None,
        created_at: datetime | None = None,
    ) -> dict[str, Any]:
        created_at = created_at or _utc_now()
        row = {
            "id": str(uuid.uuid4()),
            "posted_by": posted_by,
            "text": text,
            "img": img,
            "likes": [],
            "replies": [],
            "created_at": created_at,
            "updated_at": created_at,
        }
        self.posts[row["id"]] = row
        self._order[row["id"]] = next(self._sequence)
        return copy.deepcopy(row)

    async def delete(self, post_id: str) -> bool:
        self._order.pop(post_id, None)
        return self.posts.pop(post_id, None) is not None

    async def add_like(self, post_id: str, user_id: str) -> None:
        row = self.posts.get(post_id)
        if row is not None and user_id not in row["likes"]:
            row["likes"].append(user_id)
            row["updated_at"] = _utc_now()

    async def remove_like(self, post_id: str, user_id: str) -> None:
        row = self.posts.get(post_id)
        if row is not None and user_id in row["likes"]:
            row["likes"].remove(user_id)
            row["updated_at"] = _utc_now()

    async def append_reply(self, post_id: str, reply: dict[str, Any]) -> dict[str, Any] | None:
        row = self.posts.get(post_id)
        if row is None:
            return None
        row["replies"].append(copy.deepcopy(reply))
        row["updated_at"] = _utc_now()
        return copy.deepcopy(row)

    async def list_by_authors(self, author_ids: list[str]) -> list[dict[str, Any]]:
        authors = set(author_ids)
        rows = [row for row in self.posts.values() if row["posted_by"] in authors]
        rows.sort(key=lambda r: (r["created_at"], self._order[r["id"]]), reverse=True)
        return [copy.deepcopy(r) for r in rows]
