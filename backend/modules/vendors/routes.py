"""Vendor CRUD routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.audit import get_actor
from core.db import get_db
from core.pagination import PageParams, page_params, page_response
from modules.vendors import services
from modules.vendors.schemas import (
    VendorCreate, VendorDetail, VendorPage, VendorResponse, VendorUpdate,
)

router = APIRouter(prefix="/vendors", tags=["Vendors"])


@router.get("", response_model=VendorPage)
def list_vendors(
    active: Optional[bool] = None,
    q: Optional[str] = None,
    page: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    """List vendors, optionally filtered by active flag or name/code search."""
    rows, total = services.list_vendors(db, page, active=active, q=q)
    return page_response(rows, total, page, VendorResponse)


@router.get("/{vendor_id}", response_model=VendorDetail)
def get_vendor(vendor_id: int, db: Session = Depends(get_db)):
    return services.get_vendor(db, vendor_id)


@router.post("", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
def create_vendor(data: VendorCreate, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    return services.create_vendor(db, data.model_dump(), actor)


@router.patch("/{vendor_id}", response_model=VendorResponse)
def update_vendor(
    vendor_id: int,
    data: VendorUpdate,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Update a vendor. Setting active=false also deactivates its software."""
    return services.update_vendor(db, vendor_id, data.model_dump(exclude_unset=True), actor)


@router.post("/{vendor_id}/deactivate", response_model=VendorResponse)
def deactivate_vendor(vendor_id: int, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    return services.deactivate_vendor(db, vendor_id, actor)


@router.delete("/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vendor(vendor_id: int, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    """Hard delete an inactive vendor with no software."""
    services.delete_vendor(db, vendor_id, actor)
