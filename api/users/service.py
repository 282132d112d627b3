"""
User business logic.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Response

from auth import security, session
from auth.schemas import CallerIdentity
from core.config import Settings
from core.errors import (
    Conflict,
    Forbidden,
    InvalidCredentials,
    NotFound,
    SelfReferenceError,
    service_boundary,
)
from core.store import Store

from . import schemas
from .repository import normalize_email

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "username", "email", "profile_pic", "bio")


@service_boundary
async def signup(
    store: Store,
    payload: schemas.SignupRequest,
    *,
    response: Response,
    settings: Settings,
) -> schemas.UserSummary:
    existing = await store.users.find_by_email_or_username(email=payload.email, username=payload.username)
    if existing is not None:
        raise Conflict("User already exists.")

    password_hash = security.hash_password(payload.password, rounds=settings.bcrypt_rounds)
    user_row = await store.users.create(
        name=payload.name,
        username=payload.username,
        email=payload.email,
        password_hash=password_hash,
    )

    session.issue_session(response, str(user_row["id"]), settings)
    logger.info("User %s signed up", user_row["username"])
    return schemas.UserSummary.from_row(user_row)


@service_boundary
async def login(
    store: Store,
    payload: schemas.LoginRequest,
    *,
    response: Response,
    settings: Settings,
) -> schemas.UserSummary:
    user_row = await store.users.get_by_email(payload.email)
    # Same error for unknown email and wrong password.
    if user_row is None or not security.verify_password(payload.password, str(user_row.get("password_hash") or "")):
        logger.warning("Failed login attempt for %s", normalize_email(payload.email))
        raise InvalidCredentials()

    session.issue_session(response, str(user_row["id"]), settings)
    logger.info("User %s logged in", user_row["username"])
    return schemas.UserSummary.from_row(user_row)


@service_boundary
async def logout(*, response: Response, settings: Settings) -> dict[str, str]:
    session.revoke_session(response, settings)
    return {"message": "User logged out successfully."}


async def _load_follow_pair(store: Store, target_id: str, caller: CallerIdentity) -> dict[str, Any]:
    if target_id == caller.id:
        raise SelfReferenceError()

    target = await store.users.get_by_id(target_id)
    current = await store.users.get_by_id(caller.id)
    if target is None or current is None:
        raise NotFound("User not found.")
    return current


@service_boundary
async def follow_user(store: Store, target_id: str, caller: CallerIdentity) -> None:
    await _load_follow_pair(store, target_id, caller)
    await store.users.follow(caller.id, target_id)
    logger.info("User %s followed %s", caller.id, target_id)


@service_boundary
async def unfollow_user(store: Store, target_id: str, caller: CallerIdentity) -> None:
    await _load_follow_pair(store, target_id, caller)
    await store.users.unfollow(caller.id, target_id)
    logger.info("User %s unfollowed %s", caller.id, target_id)


@service_boundary
async def follow_unfollow(store: Store, target_id: str, caller: CallerIdentity) -> dict[str, Any]:
    """
    Toggle: unfollow when the caller already follows the target, follow
    otherwise. Repeated calls alternate.
    """
    current = await _load_follow_pair(store, target_id, caller)
    if target_id in current["following"]:
        await unfollow_user(store, target_id, caller)
        return {"message": "User unfollowed successfully.", "following": False}

    await follow_user(store, target_id, caller)
    return {"message": "User followed successfully.", "following": True}


@service_boundary
async def update_profile(
    store: Store,
    target_id: str,
    caller: CallerIdentity,
    payload: schemas.UpdateProfileRequest,
    *,
    settings: Settings,
) -> schemas.UserAccount:
    if target_id != caller.id:
        raise Forbidden("You cannot update other user's profile.")

    user_row = await store.users.get_by_id(caller.id)
    if user_row is None:
        raise NotFound("User not found.")

    fields: dict[str, Any] = {}
    for name in PROFILE_FIELDS:
        value = getattr(payload, name)
        # Falsy values keep the stored one.
        if value:
            fields[name] = value
    if "email" in fields:
        fields["email"] = normalize_email(fields["email"])

    if "username" in fields and fields["username"] != user_row["username"]:
        other = await store.users.get_by_username(fields["username"])
        if other is not None and str(other["id"]) != caller.id:
            raise Conflict("Username is already taken.")
    if "email" in fields and fields["email"] != user_row["email"]:
        other = await store.users.get_by_email(fields["email"])
        if other is not None and str(other["id"]) != caller.id:
            raise Conflict("Email is already registered.")

    if payload.password:
        fields["password_hash"] = security.hash_password(payload.password, rounds=settings.bcrypt_rounds)

    updated = await store.users.update(caller.id, fields)
    if updated is None:
        raise NotFound("User not found.")

    logger.info("User %s updated profile fields %s", caller.id, sorted(fields))
    return schemas.UserAccount.from_row(updated)


@service_boundary
async def get_profile(store: Store, username: str) -> schemas.UserProfile:
    user_row = await store.users.get_by_username(username)
    if user_row is None:
        raise NotFound("User not found.")
    return schemas.UserProfile.from_row(user_row)


@service_boundary
async def me(store: Store, caller: CallerIdentity) -> schemas.UserAccount:
    user_row = await store.users.get_by_id(caller.id)
    if user_row is None:
        raise NotFound("User not found.")
    return schemas.UserAccount.from_row(user_row)
