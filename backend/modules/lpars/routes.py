"""LPAR routes — LPAR CRUD, installed software and rollback."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from core.audit import get_actor
from core.db import get_db
from core.pagination import PageParams, page_params, page_response
from modules.lpars import services
from modules.lpars.schemas import (
    InstallationResponse, InstallRequest, LparCreate, LparDetail, LparPage,
    LparResponse, LparUpdate, RollbackRequest,
)

router = APIRouter(prefix="/lpars", tags=["LPARs"])


# -------------- LPARs --------------

@router.get("", response_model=LparPage)
def list_lpars(
    customer_id: Optional[int] = None,
    package_id: Optional[int] = None,
    active: Optional[bool] = None,
    q: Optional[str] = None,
    page: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    rows, total = services.list_lpars(
        db, page, customer_id=customer_id, package_id=package_id, active=active, q=q
    )
    return page_response(rows, total, page, LparResponse)


@router.get("/{lpar_id}", response_model=LparDetail)
def get_lpar(lpar_id: int, request: Request, db: Session = Depends(get_db)):
    """LPAR with installed software and, when it has a package, a compliance summary."""
    lpar = services.get_lpar(db, lpar_id)
    detail = LparDetail.model_validate(lpar)
    provider = request.app.state.registry.get_provider("ComplianceProvider")
    if provider is not None:
        detail.compliance = provider.lpar_summary(db, lpar_id)
    return detail


@router.post("", response_model=LparResponse, status_code=status.HTTP_201_CREATED)
def create_lpar(data: LparCreate, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    return services.create_lpar(db, data.model_dump(), actor)


@router.patch("/{lpar_id}", response_model=LparResponse)
def update_lpar(
    lpar_id: int,
    data: LparUpdate,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    return services.update_lpar(db, lpar_id, data.model_dump(exclude_unset=True), actor)


@router.post("/{lpar_id}/deactivate", response_model=LparResponse)
def deactivate_lpar(lpar_id: int, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    return services.deactivate_lpar(db, lpar_id, actor)


@router.delete("/{lpar_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lpar(lpar_id: int, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    services.delete_lpar(db, lpar_id, actor)


# -------------- Installed software --------------

@router.get("/{lpar_id}/software", response_model=List[InstallationResponse])
def list_installations(lpar_id: int, db: Session = Depends(get_db)):
    return services.list_installations(db, lpar_id)


@router.post(
    "/{lpar_id}/software",
    response_model=InstallationResponse,
    status_code=status.HTTP_201_CREATED,
)
def install_software(
    lpar_id: int,
    data: InstallRequest,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Install a catalog version on the LPAR."""
    return services.install_software(db, lpar_id, data.software_version_id, actor, data.installed_date)


@router.delete("/{lpar_id}/software/{software_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_installation(
    lpar_id: int,
    software_id: int,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    services.remove_installation(db, lpar_id, software_id, actor)


@router.post("/{lpar_id}/software/{software_id}/rollback", response_model=InstallationResponse)
def rollback_installation(
    lpar_id: int,
    software_id: int,
    data: RollbackRequest,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Roll installed software back to an earlier version."""
    return services.rollback_installation(
        db, lpar_id, software_id, data.target_version_id, data.reason, actor
    )
