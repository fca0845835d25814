"""Package routes — package CRUD and item list maintenance.

Deployment endpoints for packages live in the deployments module.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.audit import get_actor
from core.db import get_db
from core.pagination import PageParams, page_params, page_response
from modules.packages import services
from modules.packages.schemas import (
    PackageCreate, PackageDetail, PackageItemCreate, PackageItemResponse,
    PackagePage, PackageResponse, PackageUpdate,
)

router = APIRouter(prefix="/packages", tags=["Packages"])


@router.get("", response_model=PackagePage)
def list_packages(
    active: Optional[bool] = None,
    q: Optional[str] = None,
    page: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    rows, total = services.list_packages(db, page, active=active, q=q)
    return page_response(rows, total, page, PackageResponse)


@router.get("/{package_id}", response_model=PackageDetail)
def get_package(package_id: int, db: Session = Depends(get_db)):
    """Package with its items in order."""
    return services.get_package(db, package_id)


@router.post("", response_model=PackageDetail, status_code=status.HTTP_201_CREATED)
def create_package(data: PackageCreate, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    """Create a package with its initial item list."""
    items = [i.model_dump() for i in data.items]
    return services.create_package(db, data.model_dump(exclude={"items"}), items, actor)


@router.patch("/{package_id}", response_model=PackageDetail)
def update_package(
    package_id: int,
    data: PackageUpdate,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Update package fields and items in one transaction."""
    items = [i.model_dump() for i in data.items] if data.items is not None else None
    fields = data.model_dump(exclude_unset=True, exclude={"items"})
    return services.update_package(db, package_id, fields, items, actor)


@router.post("/{package_id}/deactivate", response_model=PackageResponse)
def deactivate_package(package_id: int, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    return services.deactivate_package(db, package_id, actor)


@router.delete("/{package_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_package(package_id: int, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    services.delete_package(db, package_id, actor)


# -------------- Items --------------

@router.get("/{package_id}/items", response_model=List[PackageItemResponse])
def list_items(package_id: int, db: Session = Depends(get_db)):
    return services.get_package_items(db, package_id)


@router.post(
    "/{package_id}/items",
    response_model=PackageItemResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_item(
    package_id: int,
    data: PackageItemCreate,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    return services.add_item(db, package_id, data.model_dump(), actor)


@router.delete("/{package_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    package_id: int,
    item_id: int,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    services.delete_item(db, package_id, item_id, actor)
