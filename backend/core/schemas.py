"""
core/schemas.py — Core/general Pydantic schemas and field types.
"""

from typing import Annotated, ClassVar, List, Any, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, Field, model_validator


def _upper_strip(value):
    if isinstance(value, str):
        return value.strip().upper()
    return value


def _empty_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Entity codes: uppercased on input, then validated.
Code = Annotated[
    str,
    BeforeValidator(_upper_strip),
    Field(min_length=2, max_length=20, pattern=r"^[A-Z0-9_-]+$"),
]
Name = Annotated[str, Field(min_length=2, max_length=100)]
Description = Annotated[Optional[str], BeforeValidator(_empty_to_none), Field(max_length=500)]
VersionString = Annotated[str, Field(min_length=1, max_length=50)]
PtfLevel = Annotated[Optional[str], BeforeValidator(_empty_to_none), Field(max_length=50)]


class PaginatedResponse(BaseModel):
    """Generic paginated response wrapper."""
    items: List[Any]
    total: int
    limit: int
    offset: int


class PartialUpdate(BaseModel):
    """Base for PATCH bodies: omitted fields are left alone, but NOT NULL
    columns listed in ``not_null`` may not be explicitly set to null."""

    not_null: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_nulls(self):
        for field in self.not_null:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} may not be null")
        return self
