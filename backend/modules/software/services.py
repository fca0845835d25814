"""
modules/software/services.py — Software catalog and version management.

A software's current-version pointer and the is_current flags of its
versions are kept in step here: exactly one version is current once any
version has been marked current.
"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.audit import apply_changes, log_audit, row_snapshot
from core.base import AuditAction, EntityType
from core.db import atomic, ensure_unique, get_or_404
from core.errors import ValidationError
from core.lifecycle import ensure_deletable
from core.pagination import PageParams, paginate
from modules.lpars.models import LparSoftware
from modules.packages.models import PackageItem
from modules.software.models import Software, SoftwareVersion
from modules.vendors.models import Vendor

log = logging.getLogger("inventory.api")


# -------------- Software --------------

def get_software(db: Session, software_id: int) -> Software:
    return get_or_404(db, Software, software_id, "Software")


def list_software(
    db: Session,
    page: PageParams,
    vendor_id: Optional[int] = None,
    active: Optional[bool] = None,
    q: Optional[str] = None,
):
    query = db.query(Software)
    if vendor_id is not None:
        query = query.filter(Software.vendor_id == vendor_id)
    if active is not None:
        query = query.filter(Software.active == active)
    if q:
        query = query.filter(Software.name.ilike(f"%{q}%"))
    return paginate(query.order_by(Software.name), page)


def create_software(db: Session, data: dict, user_id: Optional[str] = None) -> Software:
    get_or_404(db, Vendor, data["vendor_id"], "Vendor")
    with atomic(db):
        software = Software(**data)
        db.add(software)
        db.flush()
        log_audit(db, EntityType.SOFTWARE, software.id, AuditAction.CREATE, row_snapshot(software), user_id)
    db.refresh(software)
    log.info(f"Created software {software.name} (id={software.id})")
    return software


def update_software(db: Session, software_id: int, data: dict, user_id: Optional[str] = None) -> Software:
    software = get_software(db, software_id)
    if data.get("vendor_id") is not None:
        get_or_404(db, Vendor, data["vendor_id"], "Vendor")
    with atomic(db):
        changes = apply_changes(software, data)
        if changes:
            log_audit(db, EntityType.SOFTWARE, software.id, AuditAction.UPDATE, changes, user_id)
    db.refresh(software)
    return software


def deactivate_software(db: Session, software_id: int, user_id: Optional[str] = None) -> Software:
    return update_software(db, software_id, {"active": False}, user_id)


def software_dependents(db: Session, software_id: int) -> dict:
    return {
        "package items": db.query(func.count(PackageItem.id)).filter(PackageItem.software_id == software_id).scalar(),
        "installations": db.query(func.count(LparSoftware.id)).filter(LparSoftware.software_id == software_id).scalar(),
    }


def delete_software(db: Session, software_id: int, user_id: Optional[str] = None) -> None:
    """Hard delete: software must be inactive and unused by packages and LPARs."""
    software = get_software(db, software_id)
    ensure_deletable("Software", software, software_dependents(db, software_id))
    name = software.name
    with atomic(db):
        log_audit(db, EntityType.SOFTWARE, software.id, AuditAction.DELETE, row_snapshot(software), user_id)
        software.current_version = None
        db.flush()
        db.delete(software)
    log.info(f"Deleted software {name} (id={software_id})")


# -------------- Versions --------------

def list_versions(db: Session, software_id: int) -> list:
    get_software(db, software_id)
    return (
        db.query(SoftwareVersion)
        .filter(SoftwareVersion.software_id == software_id)
        .order_by(SoftwareVersion.release_date.desc(), SoftwareVersion.id.desc())
        .all()
    )


def get_version(db: Session, version_id: int) -> SoftwareVersion:
    return get_or_404(db, SoftwareVersion, version_id, "SoftwareVersion")


def _make_current(software: Software, version: SoftwareVersion) -> None:
    for sibling in software.versions:
        sibling.is_current = sibling.id == version.id
    version.is_current = True
    software.current_version = version


def add_version(db: Session, software_id: int, data: dict, user_id: Optional[str] = None) -> SoftwareVersion:
    """Add a version; with is_current=True it replaces the software's current version."""
    software = get_software(db, software_id)
    ensure_unique(
        db, SoftwareVersion, "Version",
        version=data["version"], software_id=software_id, ptf_level=data.get("ptf_level"),
    )
    make_current = data.pop("is_current", False)
    previous = software.current_version

    with atomic(db):
        version = SoftwareVersion(software_id=software_id, is_current=False, **data)
        db.add(version)
        db.flush()
        db.refresh(software)
        if make_current:
            _make_current(software, version)
        changes = {
            "version_id": version.id,
            "version": version.version,
            "ptf_level": version.ptf_level,
            "is_current": make_current,
        }
        if make_current:
            changes["previous_current"] = str(previous.ref) if previous else None
        log_audit(db, EntityType.SOFTWARE, software.id, AuditAction.VERSION_UPDATE, changes, user_id)
    db.refresh(version)
    log.info(f"Added version {version.ref} to software {software.name}")
    return version


def set_current_version(db: Session, software_id: int, version_id: int, user_id: Optional[str] = None) -> Software:
    software = get_software(db, software_id)
    version = get_version(db, version_id)
    if version.software_id != software.id:
        raise ValidationError(
            f"Version {version_id} does not belong to software {software_id}", field="version_id"
        )
    previous = software.current_version
    if previous is not None and previous.id == version.id and version.is_current:
        return software

    with atomic(db):
        _make_current(software, version)
        log_audit(
            db, EntityType.SOFTWARE, software.id, AuditAction.VERSION_UPDATE,
            {
                "version_id": version.id,
                "current": {"old": str(previous.ref) if previous else None, "new": str(version.ref)},
            },
            user_id,
        )
    db.refresh(software)
    return software


def update_version(db: Session, version_id: int, data: dict, user_id: Optional[str] = None) -> SoftwareVersion:
    version = get_version(db, version_id)
    new_version = data.get("version", version.version)
    new_ptf = data.get("ptf_level", version.ptf_level)
    if (new_version, new_ptf) != (version.version, version.ptf_level):
        ensure_unique(
            db, SoftwareVersion, "Version", exclude_id=version.id,
            version=new_version, software_id=version.software_id, ptf_level=new_ptf,
        )
    with atomic(db):
        changes = apply_changes(version, data)
        if changes:
            log_audit(db, EntityType.SOFTWARE_VERSION, version.id, AuditAction.UPDATE, changes, user_id)
    db.refresh(version)
    return version


def delete_version(db: Session, version_id: int, user_id: Optional[str] = None) -> None:
    """Delete a version that is neither current nor required by a package."""
    version = get_version(db, version_id)
    if version.is_current:
        raise ValidationError("The current version cannot be deleted", field="version_id")
    used_by = db.query(func.count(PackageItem.id)).filter(PackageItem.software_version_id == version_id).scalar()
    if used_by:
        raise ValidationError(f"Version is required by {used_by} package items", field="version_id")
    with atomic(db):
        log_audit(db, EntityType.SOFTWARE_VERSION, version.id, AuditAction.DELETE, row_snapshot(version), user_id)
        db.delete(version)
