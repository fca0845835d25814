"""
modules/packages/schemas.py — Pydantic schemas for packages and their items.
"""

from datetime import date, datetime
from typing import ClassVar, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from core.schemas import Code, Description, Name, PartialUpdate, VersionString


# ============== Item Schemas ==============

class PackageItemIn(BaseModel):
    """
    One row of a package's item list.

    Without ``id`` the row is added; with ``id`` it updates that item, or
    removes it when ``action`` is "delete".
    """
    id: Optional[int] = None
    software_id: int
    software_version_id: int
    required: bool = True
    order_index: Optional[int] = Field(default=None, ge=0)
    action: Optional[Literal["keep", "delete"]] = None


class PackageItemCreate(BaseModel):
    software_id: int
    software_version_id: int
    required: bool = True
    order_index: Optional[int] = Field(default=None, ge=0)


class ItemSoftware(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ItemVersion(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    version: str
    ptf_level: Optional[str] = None


class PackageItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    package_id: int
    software_id: int
    software_version_id: int
    required: bool
    order_index: int
    software: Optional[ItemSoftware] = None
    software_version: Optional[ItemVersion] = None


# ============== Package Schemas ==============

class PackageBase(BaseModel):
    name: Name
    code: Code
    version: VersionString
    description: Description = None
    release_date: Optional[date] = None


class PackageCreate(PackageBase):
    active: bool = True
    items: List[PackageItemIn] = []


class PackageUpdate(PartialUpdate):
    not_null: ClassVar[Tuple[str, ...]] = ("name", "code", "version", "active")

    name: Optional[Name] = None
    code: Optional[Code] = None
    version: Optional[VersionString] = None
    description: Description = None
    release_date: Optional[date] = None
    active: Optional[bool] = None
    items: Optional[List[PackageItemIn]] = None


class PackageResponse(PackageBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PackageDetail(PackageResponse):
    items: List[PackageItemResponse] = []


class PackagePage(BaseModel):
    items: List[PackageResponse]
    total: int
    limit: int
    offset: int
