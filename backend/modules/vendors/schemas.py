"""
modules/vendors/schemas.py — Pydantic schemas for the vendors domain.
"""

import re
from datetime import datetime
from typing import ClassVar, List, Optional, Tuple

from pydantic import BaseModel, Field, ConfigDict, field_validator

from core.schemas import Code, Name, PartialUpdate

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _clean_email(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    value = value.strip()
    if not _EMAIL.match(value):
        raise ValueError("Invalid email address")
    return value


def _clean_url(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    value = value.strip()
    if not value.startswith(("http://", "https://")):
        raise ValueError("Website must start with http:// or https://")
    return value


class VendorBase(BaseModel):
    name: Name
    code: Code
    website: Optional[str] = Field(default=None, max_length=500)
    contact_email: Optional[str] = Field(default=None, max_length=255)

    @field_validator("contact_email", mode="before")
    @classmethod
    def check_email(cls, v):
        return _clean_email(v)

    @field_validator("website", mode="before")
    @classmethod
    def check_website(cls, v):
        return _clean_url(v)


class VendorCreate(VendorBase):
    active: bool = True


class VendorUpdate(PartialUpdate):
    not_null: ClassVar[Tuple[str, ...]] = ("name", "code", "active")

    name: Optional[Name] = None
    code: Optional[Code] = None
    website: Optional[str] = Field(default=None, max_length=500)
    contact_email: Optional[str] = Field(default=None, max_length=255)
    active: Optional[bool] = None

    @field_validator("contact_email", mode="before")
    @classmethod
    def check_email(cls, v):
        return _clean_email(v)

    @field_validator("website", mode="before")
    @classmethod
    def check_website(cls, v):
        return _clean_url(v)


class VendorResponse(VendorBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VendorSoftwareSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    active: bool


class VendorDetail(VendorResponse):
    software: List[VendorSoftwareSummary] = []


class VendorPage(BaseModel):
    items: List[VendorResponse]
    total: int
    limit: int
    offset: int
