"""
modules/lpars/schemas.py — Pydantic schemas for LPARs and installed software.
"""

from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.schemas import Code, Description, Name, PartialUpdate


# ============== LPAR Schemas ==============

class LparBase(BaseModel):
    name: Name
    code: Code
    customer_id: int
    description: Description = None
    current_package_id: Optional[int] = None


class LparCreate(LparBase):
    active: bool = True


class LparUpdate(PartialUpdate):
    not_null: ClassVar[Tuple[str, ...]] = ("name", "code", "customer_id", "active")

    name: Optional[Name] = None
    code: Optional[Code] = None
    customer_id: Optional[int] = None
    description: Description = None
    current_package_id: Optional[int] = None
    active: Optional[bool] = None


class LparResponse(LparBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LparPage(BaseModel):
    items: List[LparResponse]
    total: int
    limit: int
    offset: int


# ============== Installed Software ==============

class InstalledSoftwareName(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class InstallationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lpar_id: int
    software_id: int
    software: Optional[InstalledSoftwareName] = None
    current_version: str
    current_ptf_level: Optional[str] = None
    previous_version: Optional[str] = None
    previous_ptf_level: Optional[str] = None
    installed_date: Optional[datetime] = None
    rolled_back: bool = False
    rolled_back_at: Optional[datetime] = None
    rollback_reason: Optional[str] = None


class LparDetail(LparResponse):
    installations: List[InstallationResponse] = []
    # Filled from the ComplianceProvider when the LPAR has a current package
    compliance: Optional[Dict[str, Any]] = None


class InstallRequest(BaseModel):
    software_version_id: int
    installed_date: Optional[datetime] = None


class RollbackRequest(BaseModel):
    """Roll an installation back to a catalog version, or to its previous version when omitted."""
    target_version_id: Optional[int] = None
    reason: str = Field(..., min_length=10, max_length=500)

    @field_validator("reason", mode="before")
    @classmethod
    def strip_reason(cls, v):
        return v.strip() if isinstance(v, str) else v
