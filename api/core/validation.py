"""
Pure request validation on top of pydantic models.

`validate()` never raises for bad input. It returns a `ValidationResult`
holding either the parsed model or the list of field errors; callers decide
whether to `unwrap()` it into a `ValidationError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, TypeVar

import pydantic

from .errors import FieldError, ValidationError

M = TypeVar("M", bound=pydantic.BaseModel)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s.]+(\.[^@\s.]+)+$"
PASSWORD_PATTERN = r"^[a-zA-Z0-9]{3,30}$"


@dataclass(frozen=True)
class ValidationResult(Generic[M]):
    value: M | None = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors

    def unwrap(self) -> M:
        if not self.ok:
            raise ValidationError(errors=self.errors)
        return self.value  # type: ignore[return-value]


def _field_name(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc)


def _message(error: dict[str, Any]) -> str:
    if error.get("type") == "string_pattern_mismatch":
        field_name = str(error.get("loc", ("",))[-1])
        if field_name == "email":
            return "Must be a valid email address."
        if field_name == "password":
            return "Must be 3-30 letters or digits."
    message = str(error.get("msg") or "Invalid value.")
    if error.get("type") == "value_error":
        message = message.removeprefix("Value error, ")
    return message


def errors_from_pydantic(exc: pydantic.ValidationError) -> list[FieldError]:
    return [
        FieldError(field=_field_name(tuple(err.get("loc", ()))), message=_message(err))
        for err in exc.errors()
    ]


def validate(model: type[M], data: Any) -> ValidationResult[M]:
    if not isinstance(data, Mapping):
        return ValidationResult(errors=[FieldError(field="", message="Request body must be a JSON object.")])
    try:
        return ValidationResult(value=model.model_validate(dict(data)))
    except pydantic.ValidationError as exc:
        return ValidationResult(errors=errors_from_pydantic(exc))


def blank_to_none(value: Any) -> Any:
    """
    Treat empty strings as absent. Used by partial-update schemas so that
    `""` falls back to the stored value instead of failing pattern checks.
    """
    if value == "":
        return None
    return value
