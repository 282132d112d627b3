"""
User persistence.

`PostgresUserStore` keeps users in the `users` table; follower/following
sets are `text[]` columns. `InMemoryUserStore` mirrors the same behaviour
with plain dicts for local development and tests.
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any

import asyncpg

from core.db import Database
from core.errors import Conflict

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
  id text PRIMARY KEY,
  name text NOT NULL,
  username text NOT NULL UNIQUE,
  email text NOT NULL UNIQUE,
  password_hash text NOT NULL,
  profile_pic text NOT NULL DEFAULT '',
  bio text NOT NULL DEFAULT '' CHECK (char_length(bio) <= 256),
  followers text[] NOT NULL DEFAULT '{}',
  following text[] NOT NULL DEFAULT '{}',
  created_at timestamptz NOT NULL DEFAULT now(),
  updated_at timestamptz NOT NULL DEFAULT now()
);
"""

USER_COLUMNS = """
  id, name, username, email, password_hash, profile_pic, bio,
  followers, following, created_at, updated_at
"""

UPDATABLE_FIELDS = ("name", "username", "email", "password_hash", "profile_pic", "bio")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _row(row: dict[str, Any] | None) -> dict[str, Any] | None:
    if row is None:
        return None
    row["followers"] = list(row.get("followers") or [])
    row["following"] = list(row.get("following") or [])
    return row


async def create_schema(db: Database) -> None:
    await db.execute(SCHEMA_SQL)


class PostgresUserStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def get_by_id(self, user_id: str) -> dict[str, Any] | None:
        return _row(await self.db.fetch_one(f"SELECT {USER_COLUMNS} FROM users WHERE id = $1", user_id))

    async def get_by_username(self, username: str) -> dict[str, Any] | None:
        return _row(await self.db.fetch_one(f"SELECT {USER_COLUMNS} FROM users WHERE username = $1", username))

    async def get_by_email(self, email: str) -> dict[str, Any] | None:
        return _row(
            await self.db.fetch_one(
                f"SELECT {USER_COLUMNS} FROM users WHERE lower(email) = lower($1)",
                normalize_email(email),
            )
        )

    async def find_by_email_or_username(self, *, email: str, username: str) -> dict[str, Any] | None:
        return _row(
            await self.db.fetch_one(
                f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE lower(email) = lower($1) OR username = $2
                LIMIT 1
                """,
                normalize_email(email),
                username,
            )
        )

    async def create(
        self,
        *,
        name: str,
        username: str,
        email: str,
        password_hash: str,
    ) -> dict[str, Any]:
        try:
            row = await self.db.fetch_one(
                f"""
                INSERT INTO users (id, name, username, email, password_hash)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {USER_COLUMNS}
                """,
                str(uuid.uuid4()),
                name,
                username,
                normalize_email(email),
                password_hash,
            )
        except asyncpg.UniqueViolationError as exc:
            raise Conflict("User already exists.") from exc
        if row is None:
            raise RuntimeError("Failed to create user.")
        return _row(row)

    async def update(self, user_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update user fields: {sorted(unknown)}")

        assignments: list[str] = []
        args: list[Any] = [user_id]
        for key, value in fields.items():
            if key == "email":
                value = normalize_email(value)
            args.append(value)
            assignments.append(f"{key} = ${len(args)}")
        assignments.append("updated_at = now()")

        try:
            row = await self.db.fetch_one(
                f"""
                UPDATE users
                SET {", ".join(assignments)}
                WHERE id = $1
                RETURNING {USER_COLUMNS}
                """,
                *args,
            )
        except asyncpg.UniqueViolationError as exc:
            raise Conflict("Username or email is already taken.") from exc
        return _row(row)

    async def follow(self, follower_id: str, target_id: str) -> None:
        # Both sides of the relation change together.
        async with self.db.transaction() as conn:
            await conn.execute(
                """
                UPDATE users
                SET following = array_append(following, $2), updated_at = now()
                WHERE id = $1
                  AND NOT ($2 = ANY(following))
                """,
                follower_id,
                target_id,
            )
            await conn.execute(
                """
                UPDATE users
                SET followers = array_append(followers, $1), updated_at = now()
                WHERE id = $2
                  AND NOT ($1 = ANY(followers))
                """,
                follower_id,
                target_id,
            )

    async def unfollow(self, follower_id: str, target_id: str) -> None:
        async with self.db.transaction() as conn:
            await conn.execute(
                """
                UPDATE users
                SET following = array_remove(following, $2), updated_at = now()
                WHERE id = $1
                """,
                follower_id,
                target_id,
            )
            await conn.execute(
                """
                UPDATE users
                SET followers = array_remove(followers, $1), updated_at = now()
                WHERE id = $2
                """,
                follower_id,
                target_id,
            )


class InMemoryUserStore:
    """Dict-backed user store for development and tests."""

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}

    def reset(self) -> None:
        self.users.clear()

    async def get_by_id(self, user_id: str) -> dict[str, Any] | None:
        row = self.users.get(user_id)
        return copy.deepcopy(row) if row is not None else None

    async def get_by_username(self, username: str) -> dict[str, Any] | None:
        for row in self.users.values():
            if row["username"] == username:
                return copy.deepcopy(row)
        return None

    async def get_by_email(self, email: str) -> dict[str, Any] | None:
        email = normalize_email(email)
        for row in self.users.values():
            if row["email"] == email:
                return copy.deepcopy(row)
        return None

    async def find_by_email_or_username(self, *, email: str, username: str) -> dict[str, Any] | None:
        email = normalize_email(email)
        for row in self.users.values():
            if row["email"] == email or row["username"] == username:
                return copy.deepcopy(row)
        return None

    def _taken(self, key: str, value: str, *, exclude_id: str | None = None) -> bool:
        return any(row[key] == value and row["id"] != exclude_id for row in self.users.values())

    async def create(
        self,
        *,
        name: str,
        username: str,
        email: str,
        password_hash: str,
    ) -> dict[str, Any]:
        email = normalize_email(email)
        if self._taken("email", email) or self._taken("username", username):
            raise Conflict("User already exists.")

        now = _utc_now()
        row = {
            "id": str(uuid.uuid4()),
            "name": name,
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "profile_pic": "",
            "bio": "",
            "followers": [],
            "following": [],
            "created_at": now,
            "updated_at": now,
        }
        self.users[row["id"]] = row
        return copy.deepcopy(row)

    async def update(self, user_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update user fields: {sorted(unknown)}")

        row = self.users.get(user_id)
        if row is None:
            return None

        changes = dict(fields)
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
        for key in ("email", "username"):
            if key in changes and self._taken(key, changes[key], exclude_id=user_id):
                raise Conflict("Username or email is already taken.")

        row.update(changes)
        row["updated_at"] = _utc_now()
        return copy.deepcopy(row)

    async def follow(self, follower_id: str, target_id: str) -> None:
        follower = self.users.get(follower_id)
        target = self.users.get(target_id)
        if follower is None or target is None:
            return None
        now = _utc_now()
        if target_id not in follower["following"]:
            follower["following"].append(target_id)
            follower["updated_at"] = now
        if follower_id not in target["followers"]:
            target["followers"].append(follower_id)
            target["updated_at"] = now

    async def unfollow(self, follower_id: str, target_id: str) -> None:
        follower = self.users.get(follower_id)
        target = self.users.get(target_id)
        now = _utc_now()
        if follower is not None and target_id in follower["following"]:
            follower["following"].remove(target_id)
            follower["updated_at"] = now
        if target is not None and follower_id in target["followers"]:
            target["followers"].remove(follower_id)
            target["updated_at"] = now
