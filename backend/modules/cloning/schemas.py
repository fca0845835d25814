"""
modules/cloning/schemas.py — Request bodies for the clone endpoint.

The clone request carries a free-form ``data`` object; it is validated
against the schema for the requested entity type.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel

from core.schemas import Code, Name, VersionString

EntityKind = Literal["software", "package", "lpar", "customer", "vendor"]


class CloneRequest(BaseModel):
    entity_type: EntityKind
    source_id: int
    data: Dict[str, Any] = {}


class CloneSoftwareData(BaseModel):
    name: Name
    vendor_id: Optional[int] = None
    clone_versions: bool = True


class ClonePackageData(BaseModel):
    name: Name
    code: Code
    version: VersionString


class CloneLparData(BaseModel):
    name: Name
    code: Code
    customer_id: Optional[int] = None


class CloneNamedData(BaseModel):
    """Customer and vendor clones only need a new name and code."""
    name: Name
    code: Code


CLONE_DATA = {
    "software": CloneSoftwareData,
    "package": ClonePackageData,
    "lpar": CloneLparData,
    "customer": CloneNamedData,
    "vendor": CloneNamedData,
}


class CloneResponse(BaseModel):
    entity_type: EntityKind
    source_id: int
    id: int
    name: str
    code: Optional[str] = None
