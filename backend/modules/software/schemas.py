"""
modules/software/schemas.py — Pydantic schemas for the software catalog.
"""

from datetime import date, datetime
from typing import ClassVar, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.schemas import Description, Name, PartialUpdate, PtfLevel, VersionString
from core.versions import parse_vendor_designation


# ============== Version Schemas ==============

class SoftwareVersionBase(BaseModel):
    version: VersionString
    ptf_level: PtfLevel = None
    release_date: Optional[date] = None
    end_of_support: Optional[date] = None
    release_notes: Optional[str] = Field(default=None, max_length=5000)

    @model_validator(mode="after")
    def check_dates(self):
        if self.release_date and self.end_of_support and self.end_of_support < self.release_date:
            raise ValueError("end_of_support must not be before release_date")
        return self


class SoftwareVersionCreate(SoftwareVersionBase):
    is_current: bool = False

    @model_validator(mode="after")
    def split_designation(self):
        # "V2R4M0-PTF12345" typed into the version field with no PTF given
        if self.ptf_level is None:
            ref = parse_vendor_designation(self.version)
            self.version, self.ptf_level = ref.version, ref.ptf_level
        return self


class SoftwareVersionUpdate(PartialUpdate):
    not_null: ClassVar[Tuple[str, ...]] = ("version",)

    version: Optional[VersionString] = None
    ptf_level: PtfLevel = None
    release_date: Optional[date] = None
    end_of_support: Optional[date] = None
    release_notes: Optional[str] = Field(default=None, max_length=5000)


class SoftwareVersionResponse(SoftwareVersionBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    software_id: int
    is_current: bool
    created_at: Optional[datetime] = None


class SetCurrentVersion(BaseModel):
    version_id: int


# ============== Software Schemas ==============

class SoftwareBase(BaseModel):
    name: Name
    vendor_id: int
    description: Description = None


class SoftwareCreate(SoftwareBase):
    active: bool = True


class SoftwareUpdate(PartialUpdate):
    not_null: ClassVar[Tuple[str, ...]] = ("name", "vendor_id", "active")

    name: Optional[Name] = None
    vendor_id: Optional[int] = None
    description: Description = None
    active: Optional[bool] = None


class SoftwareResponse(SoftwareBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    active: bool
    current_version_id: Optional[int] = None
    current_version: Optional[SoftwareVersionResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SoftwareDetail(SoftwareResponse):
    versions: List[SoftwareVersionResponse] = []


class SoftwarePage(BaseModel):
    items: List[SoftwareResponse]
    total: int
    limit: int
    offset: int
