"""
Row snapshots and position validation – *pure Pydantic* (no SQL here).

Anything with attribute access can take part in a list (ORM instances,
plain objects); `Record` is what this package hands back when it reads rows
itself.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

_POSITION = TypeAdapter(Annotated[int, Field(strict=True, gt=0)] | None)


class Record(BaseModel):
    """One row: every selected column becomes an attribute."""

    model_config = {"extra": "allow", "arbitrary_types_allowed": True}

    @classmethod
    def from_row(cls, row: Any) -> "Record":
        return cls.model_validate(dict(row._mapping))

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in (self.model_extra or {}).items())
        return f"Record({fields})"


def position_errors(value: Any) -> list[str]:
    """Messages for an invalid position; empty when `value` is None or a positive int."""
    # bool is an int subclass, strict mode would let it through as 1/0
    if isinstance(value, bool):
        return ["Input should be a valid integer"]
    try:
        _POSITION.validate_python(value)
    except ValidationError as exc:
        return [err["msg"] for err in exc.errors()]
    return []


def is_blank(value: Any) -> bool:
    """None or an empty string counts as "no position supplied"."""
    return value is None or (isinstance(value, str) and not value.strip())
