"""
modules/lpars/services.py — LPARs, installed software and rollback.

Installed software rows copy the version/PTF strings from the catalog at
install time; later catalog edits do not touch them.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from core.audit import apply_changes, log_audit, row_snapshot
from core.base import AuditAction, EntityType
from core.db import atomic, ensure_unique, get_or_404
from core.errors import DuplicateError, NotFoundError, ValidationError
from core.lifecycle import ensure_deletable
from core.pagination import PageParams, paginate
from core.versions import VersionRef, format_software_version, same_ptf
from modules.customers.models import Customer
from modules.lpars.models import Lpar, LparSoftware
from modules.packages.models import Package
from modules.software.models import SoftwareVersion

log = logging.getLogger("inventory.api")


def _utcnow():
    return datetime.now(timezone.utc)


# -------------- LPARs --------------

def get_lpar(db: Session, lpar_id: int) -> Lpar:
    return get_or_404(db, Lpar, lpar_id, "LPAR")


def list_lpars(
    db: Session,
    page: PageParams,
    customer_id: Optional[int] = None,
    package_id: Optional[int] = None,
    active: Optional[bool] = None,
    q: Optional[str] = None,
):
    query = db.query(Lpar)
    if customer_id is not None:
        query = query.filter(Lpar.customer_id == customer_id)
    if package_id is not None:
        query = query.filter(Lpar.current_package_id == package_id)
    if active is not None:
        query = query.filter(Lpar.active == active)
    if q:
        pattern = f"%{q}%"
        query = query.filter(or_(Lpar.name.ilike(pattern), Lpar.code.ilike(pattern)))
    return paginate(query.order_by(Lpar.name), page)


def _check_references(db: Session, data: dict) -> None:
    if data.get("customer_id") is not None:
        get_or_404(db, Customer, data["customer_id"], "Customer")
    if data.get("current_package_id") is not None:
        get_or_404(db, Package, data["current_package_id"], "Package")


def create_lpar(db: Session, data: dict, user_id: Optional[str] = None) -> Lpar:
    ensure_unique(db, Lpar, "LPAR code", code=data["code"])
    _check_references(db, data)
    with atomic(db):
        lpar = Lpar(**data)
        db.add(lpar)
        db.flush()
        log_audit(db, EntityType.LPAR, lpar.id, AuditAction.CREATE, row_snapshot(lpar), user_id)
    db.refresh(lpar)
    log.info(f"Created LPAR {lpar.code} (id={lpar.id})")
    return lpar


def update_lpar(db: Session, lpar_id: int, data: dict, user_id: Optional[str] = None) -> Lpar:
    lpar = get_lpar(db, lpar_id)
    if data.get("code") and data["code"] != lpar.code:
        ensure_unique(db, Lpar, "LPAR code", exclude_id=lpar.id, code=data["code"])
    _check_references(db, data)
    with atomic(db):
        changes = apply_changes(lpar, data)
        if changes:
            log_audit(db, EntityType.LPAR, lpar.id, AuditAction.UPDATE, changes, user_id)
    db.refresh(lpar)
    return lpar


def deactivate_lpar(db: Session, lpar_id: int, user_id: Optional[str] = None) -> Lpar:
    return update_lpar(db, lpar_id, {"active": False}, user_id)


def delete_lpar(db: Session, lpar_id: int, user_id: Optional[str] = None) -> None:
    """Hard delete an inactive LPAR; its installations go with it."""
    lpar = get_lpar(db, lpar_id)
    ensure_deletable("LPAR", lpar, {})
    code = lpar.code
    with atomic(db):
        snapshot = row_snapshot(lpar)
        snapshot["installations"] = len(lpar.installations)
        log_audit(db, EntityType.LPAR, lpar.id, AuditAction.DELETE, snapshot, user_id)
        db.delete(lpar)
    log.info(f"Deleted LPAR {code} (id={lpar_id})")


# -------------- Installed software --------------

def list_installations(db: Session, lpar_id: int) -> List[LparSoftware]:
    get_lpar(db, lpar_id)
    return (
        db.query(LparSoftware)
        .options(selectinload(LparSoftware.software))
        .filter(LparSoftware.lpar_id == lpar_id)
        .order_by(LparSoftware.software_id)
        .all()
    )


def get_installation(db: Session, lpar_id: int, software_id: int) -> LparSoftware:
    row = (
        db.query(LparSoftware)
        .filter(LparSoftware.lpar_id == lpar_id, LparSoftware.software_id == software_id)
        .first()
    )
    if row is None:
        raise NotFoundError(f"Installation of software {software_id} on LPAR", lpar_id)
    return row


def install_software(
    db: Session,
    lpar_id: int,
    software_version_id: int,
    user_id: Optional[str] = None,
    installed_date: Optional[datetime] = None,
) -> LparSoftware:
    """Record a catalog version as installed on the LPAR."""
    lpar = get_lpar(db, lpar_id)
    version = get_or_404(db, SoftwareVersion, software_version_id, "SoftwareVersion")
    exists = (
        db.query(LparSoftware.id)
        .filter(LparSoftware.lpar_id == lpar.id, LparSoftware.software_id == version.software_id)
        .first()
    )
    if exists is not None:
        raise DuplicateError(
            f"Software {version.software_id} is already installed on LPAR {lpar.code}",
            field="software_id", value=version.software_id,
        )
    with atomic(db):
        row = LparSoftware(
            lpar_id=lpar.id,
            software_id=version.software_id,
            current_version=version.version,
            current_ptf_level=version.ptf_level or None,
            installed_date=installed_date or _utcnow(),
            rolled_back=False,
        )
        db.add(row)
        db.flush()
        log_audit(db, EntityType.LPAR_SOFTWARE, row.id, AuditAction.CREATE, row_snapshot(row), user_id)
    db.refresh(row)
    log.info(f"Installed {version.ref} on LPAR {lpar.code}")
    return row


def remove_installation(db: Session, lpar_id: int, software_id: int, user_id: Optional[str] = None) -> None:
    row = get_installation(db, lpar_id, software_id)
    with atomic(db):
        log_audit(db, EntityType.LPAR_SOFTWARE, row.id, AuditAction.DELETE, row_snapshot(row), user_id)
        db.delete(row)


# -------------- Rollback --------------

def _rollback_target(db: Session, row: LparSoftware, target_version_id: Optional[int]) -> VersionRef:
    if target_version_id is None:
        if not row.previous_version:
            raise ValidationError(
                "No previous version recorded to roll back to", field="target_version_id"
            )
        return VersionRef(row.previous_version, row.previous_ptf_level or None)

    version = db.get(SoftwareVersion, target_version_id)
    if version is None or version.software_id != row.software_id:
        raise ValidationError(
            f"Version {target_version_id} is not a version of software {row.software_id}",
            field="target_version_id",
        )
    return VersionRef(version.version, version.ptf_level or None)


def rollback_installation(
    db: Session,
    lpar_id: int,
    software_id: int,
    target_version_id: Optional[int],
    reason: str,
    user_id: Optional[str] = None,
) -> LparSoftware:
    """
    Swap an installation back to an earlier version.

    The target is the given catalog version of the same software, or the
    row's previous version when no target is given. The current version
    becomes the previous one and the row is flagged as rolled back.
    """
    row = get_installation(db, lpar_id, software_id)
    target = _rollback_target(db, row, target_version_id)
    if row.current_version == target.version and same_ptf(row.current_ptf_level, target.ptf_level):
        raise ValidationError(
            "Cannot rollback to the currently installed version", field="target_version_id"
        )

    before = row.current
    with atomic(db):
        row.previous_version = row.current_version
        row.previous_ptf_level = row.current_ptf_level
        row.current_version = target.version
        row.current_ptf_level = target.ptf_level
        row.rolled_back = True
        row.rolled_back_at = _utcnow()
        row.rollback_reason = reason
        log_audit(
            db, EntityType.LPAR, lpar_id, AuditAction.ROLLBACK,
            {
                "software_id": software_id,
                "installation_id": row.id,
                "from_version": before.version,
                "from_ptf_level": before.ptf_level,
                "to_version": target.version,
                "to_ptf_level": target.ptf_level,
                "reason": reason,
            },
            user_id,
        )
    db.refresh(row)
    log.info(
        f"Rolled back software {software_id} on LPAR {lpar_id}: "
        f"{format_software_version(before)} -> {format_software_version(target)}"
    )
    return row
