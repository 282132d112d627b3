"""
Shared helpers for the test suite.
"""

from __future__ import annotations

from fastapi import Response

from auth.schemas import CallerIdentity
from core.config import Settings
from core.store import Store
from users import schemas as user_schemas
from users import service as user_service

TEST_SETTINGS = Settings(
    use_in_memory_store=True,
    jwt_secret="test-secret",
    bcrypt_rounds=4,
    log_level="WARNING",
)


async def make_user(
    store: Store,
    username: str,
    *,
    password: str = "secret123",
    email: str | None = None,
) -> CallerIdentity:
    payload = user_schemas.SignupRequest(
        name=username.title(),
        username=username,
        email=email or f"{username}@example.com",
        password=password,
    )
    summary = await user_service.signup(store, payload, response=Response(), settings=TEST_SETTINGS)
    row = await store.users.get_by_id(summary.id)
    return CallerIdentity.from_user_row(row)


async def refresh(store: Store, caller: CallerIdentity) -> CallerIdentity:
    row = await store.users.get_by_id(caller.id)
    return CallerIdentity.from_user_row(row)
