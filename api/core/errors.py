"""
Application error types.

Services raise these; `main.py` turns them into JSON responses. Each class
carries the HTTP status it maps to.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def payload(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request data."

    def __init__(self, message: str | None = None, errors: list[FieldError] | None = None) -> None:
        self.errors = list(errors or [])
        if message is None and self.errors:
            first = self.errors[0]
            message = f"{first.field}: {first.message}" if first.field else first.message
        super().__init__(message)

    def payload(self) -> dict[str, Any]:
        body = super().payload()
        body["fields"] = [e.as_dict() for e in self.errors]
        return body


class Conflict(AppError):
    status_code = 400
    default_message = "User already exists."


class InvalidCredentials(AppError):
    status_code = 400
    default_message = "Invalid username or password."


class SelfReferenceError(AppError):
    status_code = 400
    default_message = "You cannot follow/unfollow yourself."


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Not authenticated."


class UserNotFound(Unauthenticated):
    default_message = "User not found."


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden."


class NotFound(AppError):
    status_code = 404
    default_message = "Not found."


class Internal(AppError):
    status_code = 500


def service_boundary(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """
    Let `AppError` through unchanged and turn anything else into `Internal`
    carrying the original message.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except AppError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error in %s", func.__qualname__)
            raise Internal(str(exc) or exc.__class__.__name__) from exc

    return wrapper
