"""
Session cookie issuing and revocation.
"""

from __future__ import annotations

from fastapi import Response

from core.config import Settings

from . import security


def issue_session(response: Response, user_id: str, settings: Settings) -> str:
    """
    Mint an access token for `user_id` and set it as an HttpOnly cookie with
    the same lifetime as the token. Returns the token.
    """
    token = security.build_access_token(user_id=user_id, settings=settings)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    return token


def revoke_session(response: Response, settings: Settings) -> None:
    # Overwrite with an empty value that is already expired.
    response.set_cookie(
        key=settings.session_cookie_name,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
