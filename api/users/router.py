"""
User API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status

from auth.dependencies import get_current_user, get_settings
from auth.schemas import CallerIdentity
from core.config import Settings
from core.store import Store, get_store

from . import service, validation

router = APIRouter()


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    response: Response,
    body: dict[str, Any] = Body(...),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> dict:
    payload = validation.validate_signup(body).unwrap()
    user = await service.signup(store, payload, response=response, settings=settings)
    return user.to_json()


@router.post("/login")
async def login(
    response: Response,
    body: dict[str, Any] = Body(...),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> dict:
    payload = validation.validate_login(body).unwrap()
    user = await service.login(store, payload, response=response, settings=settings)
    return user.to_json()


@router.post("/logout")
async def logout(
    response: Response,
    settings: Settings = Depends(get_settings),
) -> dict:
    return await service.logout(response=response, settings=settings)


@router.get("/me")
async def me(
    store: Store = Depends(get_store),
    current_user: CallerIdentity = Depends(get_current_user),
) -> dict:
    user = await service.me(store, current_user)
    return user.to_json()


@router.post("/follow/{user_id}")
async def follow_unfollow(
    user_id: str,
    store: Store = Depends(get_store),
    current_user: CallerIdentity = Depends(get_current_user),
) -> dict:
    return await service.follow_unfollow(store, user_id, current_user)


@router.get("/profile/{username}")
async def get_profile(
    username: str,
    store: Store = Depends(get_store),
) -> dict:
    user = await service.get_profile(store, username)
    return user.to_json()


@router.put("/{user_id}")
async def update_profile(
    user_id: str,
    body: dict[str, Any] = Body(default={}),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
    current_user: CallerIdentity = Depends(get_current_user),
) -> dict:
    payload = validation.validate_profile_update(body).unwrap()
    user = await service.update_profile(store, user_id, current_user, payload, settings=settings)
    return {"message": "Profile updated successfully.", "user": user.to_json()}
