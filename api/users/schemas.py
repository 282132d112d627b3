"""
User API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from core.schemas import ApiModel
from core.validation import EMAIL_PATTERN, PASSWORD_PATTERN, blank_to_none

BIO_MAX_LENGTH = 256


class SignupRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., max_length=320, pattern=EMAIL_PATTERN)
    password: str = Field(..., pattern=PASSWORD_PATTERN)


class LoginRequest(ApiModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class UpdateProfileRequest(ApiModel):
    name: str | None = Field(default=None, max_length=100)
    username: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=320, pattern=EMAIL_PATTERN)
    password: str | None = Field(default=None, pattern=PASSWORD_PATTERN)
    profile_pic: str | None = None
    bio: str | None = Field(default=None, max_length=BIO_MAX_LENGTH)

    @field_validator("*", mode="before")
    @classmethod
    def blank_fields_are_absent(cls, value: Any) -> Any:
        # Empty values fall back to whatever is stored.
        return blank_to_none(value)


class UserSummary(ApiModel):
    id: str
    name: str
    email: str
    username: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "UserSummary":
        return cls(
            id=str(row["id"]),
            name=str(row["name"]),
            email=str(row["email"]),
            username=str(row["username"]),
        )


class UserProfile(UserSummary):
    profile_pic: str = ""
    bio: str = ""
    followers: list[str] = Field(default_factory=list)
    following: list[str] = Field(default_factory=list)
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "UserProfile":
        return cls(
            id=str(row["id"]),
            name=str(row["name"]),
            email=str(row["email"]),
            username=str(row["username"]),
            profile_pic=str(row.get("profile_pic") or ""),
            bio=str(row.get("bio") or ""),
            followers=[str(x) for x in row.get("followers") or []],
            following=[str(x) for x in row.get("following") or []],
            created_at=row.get("created_at"),
        )


class UserAccount(UserProfile):
    """
    Profile as seen by its owner: everything except the password.
    """

    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "UserAccount":
        profile = UserProfile.from_row(row)
        return cls(**profile.model_dump(), updated_at=row.get("updated_at"))
