"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request

from core.config import Settings
from core.errors import Unauthenticated, UserNotFound
from core.store import Store, get_store

from . import security
from .schemas import CallerIdentity

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _extract_bearer_token(authorization: str) -> str:
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2:
        raise Unauthenticated("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise Unauthenticated("Authorization must be: Bearer <token>.")
    return token


def get_session_token(request: Request, settings: Settings = Depends(get_settings)) -> str:
    # An explicit Authorization header wins over the session cookie.
    authorization = (request.headers.get("authorization") or "").strip()
    if authorization:
        return _extract_bearer_token(authorization)

    token = (request.cookies.get(settings.session_cookie_name) or "").strip()
    if not token:
        raise Unauthenticated("Unauthorized: no session token.")
    return token


async def resolve_caller(token: str, *, store: Store, settings: Settings) -> CallerIdentity:
    try:
        payload = security.decode_access_token(token, settings=settings)
    except security.AuthSecurityError as exc:
        raise Unauthenticated(str(exc)) from exc

    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise Unauthenticated("Invalid access token subject.")

    user_row = await store.users.get_by_id(subject)
    if user_row is None:
        logger.warning("Session token references missing user %s", subject)
        raise UserNotFound()
    return CallerIdentity.from_user_row(user_row)


async def get_current_user(
    token: str = Depends(get_session_token),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> CallerIdentity:
    return await resolve_caller(token, store=store, settings=settings)
