"""
modules/cloning/services.py — Deep copies of catalog and inventory entities.

Each clone runs in one transaction: the new row, its copied children and
one "clone" audit entry are committed together or not at all. Identity
clashes are detected before anything is written.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from core.audit import log_audit
from core.base import AuditAction, EntityType
from core.db import atomic, ensure_unique, get_or_404
from core.errors import ValidationError
from modules.customers.models import Customer
from modules.lpars.models import Lpar, LparSoftware
from modules.packages.models import Package, PackageItem
from modules.software.models import Software, SoftwareVersion
from modules.vendors.models import Vendor

log = logging.getLogger("inventory.clone")

CLONEABLE = ("software", "package", "lpar", "customer", "vendor")


def _cloned_description(label: str, description: Optional[str]) -> str:
    return f"Cloned from: {label}\n\n{description or ''}".strip()


def _audit_clone(db: Session, entity_type: EntityType, new_id: int, source, user_id, **counts) -> None:
    changes = {"source_id": source.id, "source_name": source.name}
    changes.update(counts)
    log_audit(db, entity_type, new_id, AuditAction.CLONE, changes, user_id)


def clone_software(
    db: Session,
    source_id: int,
    name: str,
    vendor_id: Optional[int] = None,
    clone_versions: bool = True,
    user_id: Optional[str] = None,
) -> Software:
    """Copy a software, optionally with its whole version history."""
    source = get_or_404(db, Software, source_id, "Software")
    if vendor_id is not None:
        get_or_404(db, Vendor, vendor_id, "Vendor")

    with atomic(db):
        clone = Software(
            name=name,
            vendor_id=vendor_id or source.vendor_id,
            description=_cloned_description(source.name, source.description),
            active=source.active,
        )
        db.add(clone)
        db.flush()
        copied = 0
        current = None
        if clone_versions:
            for version in source.versions:
                copy = SoftwareVersion(
                    software_id=clone.id,
                    version=version.version,
                    ptf_level=version.ptf_level,
                    release_date=version.release_date,
                    end_of_support=version.end_of_support,
                    release_notes=version.release_notes,
                    is_current=version.is_current,
                )
                db.add(copy)
                copied += 1
                if version.is_current:
                    current = copy
            db.flush()
            if current is not None:
                clone.current_version = current
        _audit_clone(db, EntityType.SOFTWARE, clone.id, source, user_id, versions_cloned=copied)
    db.refresh(clone)
    log.info(f"Cloned software {source.name} -> {clone.name} (id={clone.id}, {copied} versions)")
    return clone


def clone_package(
    db: Session,
    source_id: int,
    name: str,
    code: str,
    version: str,
    user_id: Optional[str] = None,
) -> Package:
    """Copy a package and its items under a new (code, version)."""
    source = get_or_404(db, Package, source_id, "Package")
    ensure_unique(db, Package, "Package code/version", code=code, version=version)

    with atomic(db):
        clone = Package(
            name=name,
            code=code,
            version=version,
            description=_cloned_description(
                f"{source.name} ({source.code} {source.version})", source.description
            ),
            release_date=source.release_date,
            active=source.active,
        )
        db.add(clone)
        db.flush()
        for item in source.items:
            db.add(PackageItem(
                package_id=clone.id,
                software_id=item.software_id,
                software_version_id=item.software_version_id,
                required=item.required,
                order_index=item.order_index,
            ))
        _audit_clone(db, EntityType.PACKAGE, clone.id, source, user_id, items_cloned=len(source.items))
    db.refresh(clone)
    log.info(f"Cloned package {source.code} {source.version} -> {code} {version} (id={clone.id})")
    return clone


def clone_lpar(
    db: Session,
    source_id: int,
    name: str,
    code: str,
    customer_id: Optional[int] = None,
    user_id: Optional[str] = None,
) -> Lpar:
    """Copy an LPAR with its installed software; the copy has no rollback history."""
    source = get_or_404(db, Lpar, source_id, "LPAR")
    ensure_unique(db, Lpar, "LPAR code", code=code)
    if customer_id is not None:
        get_or_404(db, Customer, customer_id, "Customer")
    now = datetime.now(timezone.utc)

    with atomic(db):
        clone = Lpar(
            name=name,
            code=code,
            customer_id=customer_id or source.customer_id,
            description=_cloned_description(f"{source.name} ({source.code})", source.description),
            current_package_id=source.current_package_id,
            active=source.active,
        )
        db.add(clone)
        db.flush()
        for row in source.installations:
            db.add(LparSoftware(
                lpar_id=clone.id,
                software_id=row.software_id,
                current_version=row.current_version,
                current_ptf_level=row.current_ptf_level,
                previous_version=row.previous_version,
                previous_ptf_level=row.previous_ptf_level,
                installed_date=now,
                rolled_back=False,
            ))
        _audit_clone(
            db, EntityType.LPAR, clone.id, source, user_id,
            installations_cloned=len(source.installations),
        )
    db.refresh(clone)
    log.info(f"Cloned LPAR {source.code} -> {code} (id={clone.id})")
    return clone


def clone_customer(db: Session, source_id: int, name: str, code: str, user_id: Optional[str] = None) -> Customer:
    source = get_or_404(db, Customer, source_id, "Customer")
    ensure_unique(db, Customer, "Customer code", code=code)
    with atomic(db):
        clone = Customer(
            name=name,
            code=code,
            description=_cloned_description(f"{source.name} ({source.code})", source.description),
            active=source.active,
        )
        db.add(clone)
        db.flush()
        _audit_clone(db, EntityType.CUSTOMER, clone.id, source, user_id, lpar_count=len(source.lpars))
    db.refresh(clone)
    log.info(f"Cloned customer {source.code} -> {code} (id={clone.id})")
    return clone


def clone_vendor(db: Session, source_id: int, name: str, code: str, user_id: Optional[str] = None) -> Vendor:
    source = get_or_404(db, Vendor, source_id, "Vendor")
    ensure_unique(db, Vendor, "Vendor code", code=code)
    with atomic(db):
        clone = Vendor(
            name=name,
            code=code,
            website=source.website,
            contact_email=source.contact_email,
            active=source.active,
        )
        db.add(clone)
        db.flush()
        _audit_clone(db, EntityType.VENDOR, clone.id, source, user_id, software_count=len(source.software))
    db.refresh(clone)
    log.info(f"Cloned vendor {source.code} -> {code} (id={clone.id})")
    return clone


def clone_preview(db: Session, entity_type: str, source_id: int) -> dict:
    """What a clone of the source would copy."""
    if entity_type == "software":
        software = get_or_404(db, Software, source_id, "Software")
        current = software.current_version
        return {
            "name": software.name,
            "vendor": software.vendor.name if software.vendor else None,
            "current_version": str(current.ref) if current else None,
            "version_count": len(software.versions),
        }
    if entity_type == "package":
        package = get_or_404(db, Package, source_id, "Package")
        return {
            "name": package.name,
            "code": package.code,
            "version": package.version,
            "item_count": len(package.items),
            "release_date": package.release_date.isoformat() if package.release_date else None,
        }
    if entity_type == "lpar":
        lpar = get_or_404(db, Lpar, source_id, "LPAR")
        return {
            "name": lpar.name,
            "code": lpar.code,
            "customer": lpar.customer.name if lpar.customer else None,
            "package": lpar.current_package.name if lpar.current_package else None,
            "software_count": len(lpar.installations),
        }
    if entity_type == "customer":
        customer = get_or_404(db, Customer, source_id, "Customer")
        return {
            "name": customer.name,
            "code": customer.code,
            "lpar_count": len(customer.lpars),
            "active": customer.active,
        }
    if entity_type == "vendor":
        vendor = get_or_404(db, Vendor, source_id, "Vendor")
        return {
            "name": vendor.name,
            "code": vendor.code,
            "website": vendor.website,
            "software_count": len(vendor.software),
            "active": vendor.active,
        }
    raise ValidationError(f"Cannot clone entity type '{entity_type}'", field="entity_type")
