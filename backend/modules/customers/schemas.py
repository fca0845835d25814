"""
modules/customers/schemas.py — Pydantic schemas for the customers domain.
"""

from datetime import datetime
from typing import ClassVar, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from core.schemas import Code, Description, Name, PartialUpdate


class CustomerBase(BaseModel):
    name: Name
    code: Code
    description: Description = None


class CustomerCreate(CustomerBase):
    active: bool = True


class CustomerUpdate(PartialUpdate):
    not_null: ClassVar[Tuple[str, ...]] = ("name", "code", "active")

    name: Optional[Name] = None
    code: Optional[Code] = None
    description: Description = None
    active: Optional[bool] = None


class CustomerResponse(CustomerBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerLparSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    active: bool
    current_package_id: Optional[int] = None


class CustomerDetail(CustomerResponse):
    lpars: List[CustomerLparSummary] = []


class CustomerPage(BaseModel):
    items: List[CustomerResponse]
    total: int
    limit: int
    offset: int
