"""
modules/deployments/services.py — Compliance reports, previews and package deployment.

apply_deployment() is all-or-nothing per request: every selected LPAR is
updated in one transaction, and any failure leaves no LPAR changed.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from core.audit import log_audit
from core.base import AuditAction, EntityType
from core.db import atomic, get_or_404
from core.errors import NotFoundError, ValidationError
from core.interfaces.compliance import ComplianceProvider
from core.versions import VersionRef, format_software_version, same_ptf
from modules.deployments.compliance import (
    Requirement, customer_package_subset, evaluate_compliance, requirement_from_item,
)
from modules.deployments.planner import DeploymentPlan, classify_change, plan_deployment
from modules.lpars.models import Lpar, LparSoftware
from modules.packages.models import Package, PackageItem

log = logging.getLogger("inventory.deploy")


def _utcnow():
    return datetime.now(timezone.utc)


@dataclass
class LparDeployment:
    lpar_id: int
    lpar_code: str
    installed: List[int] = field(default_factory=list)
    updated: List[int] = field(default_factory=list)
    unchanged: List[int] = field(default_factory=list)


@dataclass
class DeploymentReport:
    package_id: int
    package_code: str
    package_version: str
    lpars: List[LparDeployment] = field(default_factory=list)

    @property
    def lpar_ids(self) -> List[int]:
        return [entry.lpar_id for entry in self.lpars]


# -------------- Loading --------------

def load_requirements(db: Session, package_id: int) -> List[Requirement]:
    get_or_404(db, Package, package_id, "Package")
    items = (
        db.query(PackageItem)
        .options(selectinload(PackageItem.software), selectinload(PackageItem.software_version))
        .filter(PackageItem.package_id == package_id)
        .order_by(PackageItem.order_index)
        .all()
    )
    return [requirement_from_item(item) for item in items]


def installations_by_lpar(db: Session, lpar_ids: Iterable[int]) -> Dict[int, Dict[int, LparSoftware]]:
    """All installations of the given LPARs in one query, keyed lpar -> software."""
    lpar_ids = list(lpar_ids)
    grouped: Dict[int, Dict[int, LparSoftware]] = {lpar_id: {} for lpar_id in lpar_ids}
    if not lpar_ids:
        return grouped
    rows = db.query(LparSoftware).filter(LparSoftware.lpar_id.in_(lpar_ids)).all()
    for row in rows:
        grouped[row.lpar_id][row.software_id] = row
    return grouped


def _unique(ids: Iterable[int]) -> List[int]:
    return list(dict.fromkeys(ids))


def _load_lpars(db: Session, lpar_ids: List[int]) -> Dict[int, Lpar]:
    lpars = {lpar.id: lpar for lpar in db.query(Lpar).filter(Lpar.id.in_(lpar_ids)).all()}
    for lpar_id in lpar_ids:
        if lpar_id not in lpars:
            raise NotFoundError("LPAR", lpar_id)
    return lpars


# -------------- Read paths --------------

def lpar_compliance(db: Session, lpar_id: int, package_id: Optional[int] = None) -> dict:
    """Evaluate an LPAR against the given package, or its current one."""
    lpar = get_or_404(db, Lpar, lpar_id, "LPAR")
    package_id = package_id if package_id is not None else lpar.current_package_id
    if package_id is None:
        return {
            "lpar_id": lpar.id,
            "package_id": None,
            "status": None,
            "compliant": False,
            "coverage_score": 0,
            "counts": {},
            "items": [],
        }
    requirements = load_requirements(db, package_id)
    result = evaluate_compliance(lpar.installations, requirements)
    return {
        "lpar_id": lpar.id,
        "package_id": package_id,
        "status": result.worst_status.value,
        "compliant": result.compliant,
        "coverage_score": result.coverage_score,
        "counts": result.counts,
        "items": result.items,
    }


def plan_for_lpar(
    db: Session,
    lpar_id: int,
    package_id: int,
    software_ids: Optional[List[int]] = None,
) -> DeploymentPlan:
    """Deployment plan for one LPAR, optionally narrowed to some software."""
    lpar = get_or_404(db, Lpar, lpar_id, "LPAR")
    requirements = load_requirements(db, package_id)
    if software_ids:
        requirements = customer_package_subset(requirements, software_ids)
    return plan_deployment(lpar.installations, requirements)


def preview_deployment_impact(db: Session, lpar_id: int, package_id: int) -> List[dict]:
    """Per-item install/upgrade/downgrade/no_change rows; nothing is written."""
    get_or_404(db, Lpar, lpar_id, "LPAR")
    requirements = load_requirements(db, package_id)
    installed = installations_by_lpar(db, [lpar_id])[lpar_id]
    rows = []
    for req in requirements:
        current = installed.get(req.software_id)
        current_ref = VersionRef(current.current_version, current.current_ptf_level) if current else None
        rows.append({
            "software_id": req.software_id,
            "software_name": req.software_name,
            "current_version": format_software_version(current_ref) if current_ref else None,
            "target_version": format_software_version(req.ref),
            "change": classify_change(current_ref, req.ref).value,
            "required": req.required,
        })
    return rows


def preview_deployment(db: Session, package_id: int, lpar_ids: List[int]) -> List[dict]:
    """Preview rows for each selected LPAR."""
    lpar_ids = _unique(lpar_ids)
    lpars = _load_lpars(db, lpar_ids)
    return [
        {
            "lpar_id": lpar.id,
            "lpar_name": lpar.name,
            "lpar_code": lpar.code,
            "changes": preview_deployment_impact(db, lpar.id, package_id),
        }
        for lpar in (lpars[i] for i in lpar_ids)
    ]


def deployment_status(db: Session, package_id: int) -> List[dict]:
    """Every active LPAR with how far it is from the package."""
    requirements = load_requirements(db, package_id)
    lpars = db.query(Lpar).filter(Lpar.active.is_(True)).order_by(Lpar.customer_id, Lpar.name).all()
    installs = installations_by_lpar(db, [lpar.id for lpar in lpars])

    rows = []
    for lpar in lpars:
        installed = installs[lpar.id]
        new_installs = 0
        changes_needed = 0
        for req in requirements:
            row = installed.get(req.software_id)
            if row is None:
                new_installs += 1
            elif row.current_version != req.version or not same_ptf(row.current_ptf_level, req.ptf_level):
                changes_needed += 1
        if lpar.current_package_id == package_id:
            status = "compliant"
        elif changes_needed + new_installs > 0:
            status = "needs_update"
        else:
            status = "unknown"
        result = evaluate_compliance(installed.values(), requirements)
        rows.append({
            "lpar_id": lpar.id,
            "lpar_name": lpar.name,
            "lpar_code": lpar.code,
            "customer_id": lpar.customer_id,
            "current_package_id": lpar.current_package_id,
            "status": status,
            "compliance_status": result.worst_status.value,
            "coverage_score": result.coverage_score,
            "changes_needed": changes_needed,
            "new_installs": new_installs,
        })
    return rows


# -------------- Deployment --------------

def apply_deployment(
    db: Session,
    lpar_ids: List[int],
    package_id: int,
    user_id: Optional[str] = None,
) -> DeploymentReport:
    """
    Apply a package's versions to the selected LPARs in a single transaction.

    Every existing installation moves current -> previous and takes the
    target as current with rollback markers cleared, even when it was
    already at the target. Missing software is installed fresh. Each LPAR
    then points at the package and gets one deploy audit entry.
    """
    lpar_ids = _unique(lpar_ids)
    if not lpar_ids:
        raise ValidationError("At least one LPAR must be selected", field="lpar_ids")
    package = get_or_404(db, Package, package_id, "Package")
    if not package.active:
        raise ValidationError(f"Package {package.code} {package.version} is inactive", field="package_id")

    requirements = load_requirements(db, package_id)
    lpars = _load_lpars(db, lpar_ids)
    installs = installations_by_lpar(db, lpar_ids)
    report = DeploymentReport(package.id, package.code, package.version)
    now = _utcnow()

    with atomic(db):
        for lpar_id in lpar_ids:
            lpar = lpars[lpar_id]
            entry = LparDeployment(lpar.id, lpar.code)
            upgraded = []
            for req in requirements:
                row = installs[lpar_id].get(req.software_id)
                if row is None:
                    db.add(LparSoftware(
                        lpar_id=lpar.id,
                        software_id=req.software_id,
                        current_version=req.version,
                        current_ptf_level=req.ptf_level or None,
                        installed_date=now,
                        rolled_back=False,
                    ))
                    entry.installed.append(req.software_id)
                    continue
                if row.current_version == req.version and same_ptf(row.current_ptf_level, req.ptf_level):
                    entry.unchanged.append(req.software_id)
                else:
                    upgraded.append({
                        "software_id": req.software_id,
                        "from": format_software_version(row.current),
                        "to": format_software_version(req.ref),
                    })
                    entry.updated.append(req.software_id)
                row.previous_version = row.current_version
                row.previous_ptf_level = row.current_ptf_level
                row.current_version = req.version
                row.current_ptf_level = req.ptf_level or None
                row.installed_date = now
                row.rolled_back = False
                row.rolled_back_at = None
                row.rollback_reason = None

            previous_package_id = lpar.current_package_id
            lpar.current_package_id = package.id
            log_audit(
                db, EntityType.LPAR, lpar.id, AuditAction.DEPLOY,
                {
                    "package_id": package.id,
                    "package": f"{package.code} {package.version}",
                    "previous_package_id": previous_package_id,
                    "installed": entry.installed,
                    "updated": upgraded,
                    "unchanged": len(entry.unchanged),
                },
                user_id,
            )
            report.lpars.append(entry)

    log.info(
        f"Deployed package {package.code} {package.version} to "
        f"{len(report.lpars)} LPARs: {[e.lpar_code for e in report.lpars]}"
    )
    return report


class ComplianceService(ComplianceProvider):
    """Registered as the ComplianceProvider for other modules."""

    def lpar_summary(self, db, lpar_id: int) -> Optional[dict]:
        report = lpar_compliance(db, lpar_id)
        if report["package_id"] is None:
            return None
        return {
            "package_id": report["package_id"],
            "status": report["status"],
            "compliant": report["compliant"],
            "coverage_score": report["coverage_score"],
        }
