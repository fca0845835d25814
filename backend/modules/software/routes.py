"""Software catalog routes — software CRUD and version history."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.audit import get_actor
from core.db import get_db
from core.pagination import PageParams, page_params, page_response
from modules.software import services
from modules.software.schemas import (
    SetCurrentVersion, SoftwareCreate, SoftwareDetail, SoftwarePage, SoftwareResponse,
    SoftwareUpdate, SoftwareVersionCreate, SoftwareVersionResponse, SoftwareVersionUpdate,
)

router = APIRouter(prefix="/software", tags=["Software"])


# -------------- Software --------------

@router.get("", response_model=SoftwarePage)
def list_software(
    vendor_id: Optional[int] = None,
    active: Optional[bool] = None,
    q: Optional[str] = None,
    page: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    rows, total = services.list_software(db, page, vendor_id=vendor_id, active=active, q=q)
    return page_response(rows, total, page, SoftwareResponse)


@router.get("/{software_id}", response_model=SoftwareDetail)
def get_software(software_id: int, db: Session = Depends(get_db)):
    return services.get_software(db, software_id)


@router.post("", response_model=SoftwareResponse, status_code=status.HTTP_201_CREATED)
def create_software(data: SoftwareCreate, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    return services.create_software(db, data.model_dump(), actor)


@router.patch("/{software_id}", response_model=SoftwareResponse)
def update_software(
    software_id: int,
    data: SoftwareUpdate,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    return services.update_software(db, software_id, data.model_dump(exclude_unset=True), actor)


@router.post("/{software_id}/deactivate", response_model=SoftwareResponse)
def deactivate_software(software_id: int, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    return services.deactivate_software(db, software_id, actor)


@router.delete("/{software_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_software(software_id: int, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    """Hard delete inactive software that no package or LPAR references."""
    services.delete_software(db, software_id, actor)


# -------------- Versions --------------

@router.get("/{software_id}/versions", response_model=List[SoftwareVersionResponse])
def list_versions(software_id: int, db: Session = Depends(get_db)):
    return services.list_versions(db, software_id)


@router.post(
    "/{software_id}/versions",
    response_model=SoftwareVersionResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_version(
    software_id: int,
    data: SoftwareVersionCreate,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Add a version. Designations like "V2R4M0-PTF12345" are split into version and PTF."""
    return services.add_version(db, software_id, data.model_dump(), actor)


@router.put("/{software_id}/current-version", response_model=SoftwareResponse)
def set_current_version(
    software_id: int,
    data: SetCurrentVersion,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    return services.set_current_version(db, software_id, data.version_id, actor)


@router.patch("/versions/{version_id}", response_model=SoftwareVersionResponse)
def update_version(
    version_id: int,
    data: SoftwareVersionUpdate,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    return services.update_version(db, version_id, data.model_dump(exclude_unset=True), actor)


@router.delete("/versions/{version_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_version(version_id: int, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    services.delete_version(db, version_id, actor)
