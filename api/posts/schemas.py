"""
Post API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from core.schemas import ApiModel

TEXT_MAX_LENGTH = 500


def _not_empty(value: str) -> str:
    if value == "":
        raise ValueError("Text field is required.")
    return value


class CreatePostRequest(ApiModel):
    posted_by: str = Field(..., min_length=1)
    text: str = Field(..., max_length=TEXT_MAX_LENGTH)
    img: str | None = None

    @field_validator("text")
    @classmethod
    def text_not_empty(cls, value: str) -> str:
        return _not_empty(value)


class ReplyRequest(ApiModel):
    text: str

    @field_validator("text")
    @classmethod
    def text_not_empty(cls, value: str) -> str:
        return _not_empty(value)


class Reply(ApiModel):
    user_id: str
    text: str
    username: str
    user_profile_pic: str = ""


class PostOut(ApiModel):
    id: str
    posted_by: str
    text: str
    img: str | None = None
    likes: list[str] = Field(default_factory=list)
    replies: list[Reply] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "PostOut":
        return cls(
            id=str(row["id"]),
            posted_by=str(row["posted_by"]),
            text=str(row["text"]),
            img=row.get("img"),
            likes=[str(x) for x in row.get("likes") or []],
            replies=[Reply.model_validate(r) for r in row.get("replies") or []],
            created_at=row["created_at"],
            updated_at=row.get("updated_at"),
        )
