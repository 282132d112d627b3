"""
Per-operation validation for user requests.
"""

from __future__ import annotations

from typing import Any

from core.validation import ValidationResult, validate

from . import schemas


def validate_signup(data: Any) -> ValidationResult[schemas.SignupRequest]:
    return validate(schemas.SignupRequest, data)


def validate_login(data: Any) -> ValidationResult[schemas.LoginRequest]:
    return validate(schemas.LoginRequest, data)


def validate_profile_update(data: Any) -> ValidationResult[schemas.UpdateProfileRequest]:
    return validate(schemas.UpdateProfileRequest, data)
