"""Deployment routes — compliance, plans, previews and package deployment."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from core.audit import get_actor
from core.db import get_db
from core.rate_limit import limiter, mutation_limit
from modules.deployments import services
from modules.deployments.schemas import (
    DeploymentPlanResponse, DeploymentReportResponse, DeploymentRequest,
    LparComplianceResponse, LparDeploymentStatus, LparPreview,
)

router = APIRouter(tags=["Deployments"])


# -------------- LPAR views --------------

@router.get("/lpars/{lpar_id}/compliance", response_model=LparComplianceResponse)
def lpar_compliance(lpar_id: int, package_id: Optional[int] = None, db: Session = Depends(get_db)):
    """Compliance of an LPAR against its current package, or the one given."""
    return services.lpar_compliance(db, lpar_id, package_id)


@router.get("/lpars/{lpar_id}/plan", response_model=DeploymentPlanResponse)
def lpar_plan(
    lpar_id: int,
    package_id: int,
    software_id: Optional[List[int]] = Query(default=None),
    db: Session = Depends(get_db),
):
    """What deploying the package would change; software_id narrows to a customer's subset."""
    return services.plan_for_lpar(db, lpar_id, package_id, software_id)


# -------------- Package deployment --------------

@router.get("/packages/{package_id}/deployment-status", response_model=List[LparDeploymentStatus])
def deployment_status(package_id: int, db: Session = Depends(get_db)):
    return services.deployment_status(db, package_id)


@router.post("/packages/{package_id}/preview", response_model=List[LparPreview])
def preview_deployment(package_id: int, data: DeploymentRequest, db: Session = Depends(get_db)):
    """Read-only impact of deploying the package to each selected LPAR."""
    return services.preview_deployment(db, package_id, data.lpar_ids)


@router.post("/packages/{package_id}/deploy", response_model=DeploymentReportResponse)
@limiter.limit(mutation_limit)
def deploy_package(
    request: Request,
    package_id: int,
    data: DeploymentRequest,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Deploy the package to all selected LPARs in one transaction."""
    return services.apply_deployment(db, data.lpar_ids, package_id, actor)
