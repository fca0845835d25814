"""
modules/vendors/services.py — Vendor management.

All functions take the request session explicitly and raise domain errors
from core.errors; callers never see a half-applied change.
"""

import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.audit import apply_changes, log_audit, row_snapshot
from core.base import AuditAction, EntityType
from core.db import atomic, ensure_unique, get_or_404
from core.lifecycle import cascade_deactivate, ensure_deletable
from core.pagination import PageParams, paginate
from modules.vendors.models import Vendor

log = logging.getLogger("inventory.api")


def get_vendor(db: Session, vendor_id: int) -> Vendor:
    return get_or_404(db, Vendor, vendor_id, "Vendor")


def list_vendors(
    db: Session,
    page: PageParams,
    active: Optional[bool] = None,
    q: Optional[str] = None,
):
    query = db.query(Vendor)
    if active is not None:
        query = query.filter(Vendor.active == active)
    if q:
        pattern = f"%{q}%"
        query = query.filter(or_(Vendor.name.ilike(pattern), Vendor.code.ilike(pattern)))
    return paginate(query.order_by(Vendor.name), page)


def create_vendor(db: Session, data: dict, user_id: Optional[str] = None) -> Vendor:
    ensure_unique(db, Vendor, "Vendor code", code=data["code"])
    with atomic(db):
        vendor = Vendor(**data)
        db.add(vendor)
        db.flush()
        log_audit(db, EntityType.VENDOR, vendor.id, AuditAction.CREATE, row_snapshot(vendor), user_id)
    db.refresh(vendor)
    log.info(f"Created vendor {vendor.code} (id={vendor.id})")
    return vendor


def _deactivate_children(db: Session, vendor: Vendor, user_id: Optional[str]) -> int:
    changed = cascade_deactivate(vendor.software)
    for software in changed:
        log_audit(
            db, EntityType.SOFTWARE, software.id, AuditAction.UPDATE,
            {"active": {"old": True, "new": False}, "cascade_from": f"vendor:{vendor.id}"},
            user_id,
        )
    return len(changed)


def update_vendor(db: Session, vendor_id: int, data: dict, user_id: Optional[str] = None) -> Vendor:
    """Update scalar fields; switching ``active`` off also deactivates the vendor's software."""
    vendor = get_vendor(db, vendor_id)
    if data.get("code") and data["code"] != vendor.code:
        ensure_unique(db, Vendor, "Vendor code", exclude_id=vendor.id, code=data["code"])

    with atomic(db):
        was_active = vendor.active
        changes = apply_changes(vendor, data)
        if was_active and not vendor.active:
            changes["cascaded_software"] = _deactivate_children(db, vendor, user_id)
        if changes:
            log_audit(db, EntityType.VENDOR, vendor.id, AuditAction.UPDATE, changes, user_id)
    db.refresh(vendor)
    return vendor


def deactivate_vendor(db: Session, vendor_id: int, user_id: Optional[str] = None) -> Vendor:
    return update_vendor(db, vendor_id, {"active": False}, user_id)


def delete_vendor(db: Session, vendor_id: int, user_id: Optional[str] = None) -> None:
    """Hard delete: vendor must be inactive and own no software."""
    vendor = get_vendor(db, vendor_id)
    ensure_deletable("Vendor", vendor, {"software": len(vendor.software)})
    with atomic(db):
        log_audit(db, EntityType.VENDOR, vendor.id, AuditAction.DELETE, row_snapshot(vendor), user_id)
        code = vendor.code
        db.delete(vendor)
    log.info(f"Deleted vendor {code} (id={vendor_id})")
