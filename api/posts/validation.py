"""
Per-operation validation for post requests.
"""

from __future__ import annotations

from typing import Any

from core.validation import ValidationResult, validate

from . import schemas


def validate_create_post(data: Any) -> ValidationResult[schemas.CreatePostRequest]:
    return validate(schemas.CreatePostRequest, data)


def validate_reply(data: Any) -> ValidationResult[schemas.ReplyRequest]:
    return validate(schemas.ReplyRequest, data)
