"""
Base pydantic model for request and response bodies.

Python attributes are snake_case; JSON keys are camelCase (`postedBy`,
`profilePic`). Input is accepted in either form.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
