"""
Auth value types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CallerIdentity:
    """
    The authenticated user making a request, resolved once by the access
    guard and passed explicitly to service calls.
    """

    id: str
    username: str
    name: str = ""
    profile_pic: str = ""

    @classmethod
    def from_user_row(cls, row: dict[str, Any]) -> "CallerIdentity":
        return cls(
            id=str(row["id"]),
            username=str(row["username"]),
            name=str(row.get("name") or ""),
            profile_pic=str(row.get("profile_pic") or ""),
        )
