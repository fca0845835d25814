"""
modules/packages/services.py — Package and package-item management.

update_package() is a master-detail write: the package row and its item
list change together in one transaction. The final item set is validated
in memory (unique software, unique order index, version belongs to its
software) before anything is written.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from core.audit import apply_changes, log_audit, row_snapshot
from core.base import AuditAction, EntityType
from core.db import atomic, ensure_unique, get_or_404
from core.errors import DuplicateError, NotFoundError, ValidationError
from core.lifecycle import ensure_deletable
from core.pagination import PageParams, paginate
from modules.lpars.models import Lpar
from modules.packages.models import Package, PackageItem
from modules.software.models import Software, SoftwareVersion

log = logging.getLogger("inventory.api")

_ITEM_FIELDS = ("software_id", "software_version_id", "required", "order_index")


# -------------- Lookups --------------

def get_package(db: Session, package_id: int) -> Package:
    return get_or_404(db, Package, package_id, "Package")


def get_package_items(db: Session, package_id: int) -> List[PackageItem]:
    """Items of a package with software and required version loaded."""
    get_package(db, package_id)
    return (
        db.query(PackageItem)
        .options(selectinload(PackageItem.software), selectinload(PackageItem.software_version))
        .filter(PackageItem.package_id == package_id)
        .order_by(PackageItem.order_index)
        .all()
    )


def list_packages(
    db: Session,
    page: PageParams,
    active: Optional[bool] = None,
    q: Optional[str] = None,
):
    query = db.query(Package)
    if active is not None:
        query = query.filter(Package.active == active)
    if q:
        pattern = f"%{q}%"
        query = query.filter(or_(Package.name.ilike(pattern), Package.code.ilike(pattern)))
    return paginate(query.order_by(Package.code, Package.version.desc()), page)


# -------------- Item validation --------------

def _check_versions(db: Session, entries: Iterable[dict]) -> None:
    """Every entry's version must exist and belong to the entry's software."""
    entries = list(entries)
    version_ids = {e["software_version_id"] for e in entries}
    versions = {
        v.id: v
        for v in db.query(SoftwareVersion).filter(SoftwareVersion.id.in_(version_ids)).all()
    } if version_ids else {}
    software_ids = {e["software_id"] for e in entries}
    known_software = {
        row.id for row in db.query(Software.id).filter(Software.id.in_(software_ids)).all()
    } if software_ids else set()

    for entry in entries:
        if entry["software_id"] not in known_software:
            raise NotFoundError("Software", entry["software_id"])
        version = versions.get(entry["software_version_id"])
        if version is None:
            raise NotFoundError("SoftwareVersion", entry["software_version_id"])
        if version.software_id != entry["software_id"]:
            raise ValidationError(
                f"Version {version.id} does not belong to software {entry['software_id']}",
                field="software_version_id",
            )


def _check_item_set(items: List[dict]) -> None:
    """Software ids and order indices must be unique within the final item set."""
    seen_software = set()
    seen_order = set()
    for item in items:
        if item["software_id"] in seen_software:
            raise ValidationError(
                f"Software {item['software_id']} appears more than once in the package",
                field="software_id",
            )
        if item["order_index"] in seen_order:
            raise ValidationError(
                f"Order index {item['order_index']} is used more than once",
                field="order_index",
            )
        seen_software.add(item["software_id"])
        seen_order.add(item["order_index"])


def _assign_order(items: List[dict], taken: Iterable[int] = ()) -> None:
    """Give entries without an order_index the next free index, in list order."""
    used = set(taken) | {i["order_index"] for i in items if i.get("order_index") is not None}
    next_index = (max(used) + 1) if used else 0
    for item in items:
        if item.get("order_index") is None:
            item["order_index"] = next_index
            next_index += 1


# -------------- Packages --------------

def create_package(
    db: Session,
    data: dict,
    items: Optional[List[dict]] = None,
    user_id: Optional[str] = None,
) -> Package:
    """Create a package together with its initial items."""
    items = [{k: v for k, v in i.items() if k in _ITEM_FIELDS} for i in (items or [])]
    ensure_unique(db, Package, "Package code/version", code=data["code"], version=data["version"])
    _assign_order(items)
    _check_versions(db, items)
    _check_item_set(items)

    with atomic(db):
        package = Package(**data)
        db.add(package)
        db.flush()
        for entry in items:
            db.add(PackageItem(package_id=package.id, **entry))
        snapshot = row_snapshot(package)
        snapshot["item_count"] = len(items)
        log_audit(db, EntityType.PACKAGE, package.id, AuditAction.CREATE, snapshot, user_id)
    db.refresh(package)
    log.info(f"Created package {package.code} {package.version} with {len(items)} items")
    return package


def update_package(
    db: Session,
    package_id: int,
    data: dict,
    items: Optional[List[dict]] = None,
    user_id: Optional[str] = None,
) -> Package:
    """
    Update package fields and, when ``items`` is given, its item list.

    Item entries with an ``id`` update (or, with action "delete", remove)
    that item; entries without one are added. Items not mentioned are kept.
    """
    package = get_package(db, package_id)
    new_code = data.get("code", package.code)
    new_version = data.get("version", package.version)
    if (new_code, new_version) != (package.code, package.version):
        ensure_unique(db, Package, "Package code/version", exclude_id=package.id,
                      code=new_code, version=new_version)

    existing = {item.id: item for item in package.items}
    to_delete: List[PackageItem] = []
    to_update: List[tuple] = []
    to_add: List[dict] = []

    for entry in items or []:
        fields = {k: v for k, v in entry.items() if k in _ITEM_FIELDS}
        if entry.get("id") is None:
            if entry.get("action") == "delete":
                continue
            to_add.append(fields)
            continue
        item = existing.get(entry["id"])
        if item is None:
            raise NotFoundError(f"Item of package {package_id}", entry["id"])
        if entry.get("action") == "delete":
            to_delete.append(item)
        else:
            if fields.get("order_index") is None:
                fields["order_index"] = item.order_index
            to_update.append((item, fields))

    # Final item set: untouched + updated + added
    touched = {item.id for item in to_delete} | {item.id for item, _ in to_update}
    final = [
        {k: getattr(item, k) for k in _ITEM_FIELDS}
        for item in existing.values() if item.id not in touched
    ]
    final += [fields for _, fields in to_update]
    _assign_order(to_add, taken=[f["order_index"] for f in final])
    final += to_add
    _check_versions(db, [fields for _, fields in to_update] + to_add)
    _check_item_set(final)

    with atomic(db):
        changes = apply_changes(package, data)
        for item in to_delete:
            db.delete(item)
        db.flush()
        # Park moved items on unique negative indices so swaps don't collide
        moved = [(item, fields) for item, fields in to_update if fields["order_index"] != item.order_index]
        for item, _ in moved:
            item.order_index = -item.id
        db.flush()
        for item, fields in to_update:
            for key, value in fields.items():
                setattr(item, key, value)
        db.flush()
        for entry in to_add:
            db.add(PackageItem(package_id=package.id, **entry))
        if items is not None:
            changes["items"] = {"added": len(to_add), "updated": len(to_update), "deleted": len(to_delete)}
        if changes:
            log_audit(db, EntityType.PACKAGE, package.id, AuditAction.UPDATE, changes, user_id)
    db.refresh(package)
    return package


def deactivate_package(db: Session, package_id: int, user_id: Optional[str] = None) -> Package:
    return update_package(db, package_id, {"active": False}, user_id=user_id)


def delete_package(db: Session, package_id: int, user_id: Optional[str] = None) -> None:
    """Hard delete: package must be inactive and no LPAR may point at it."""
    package = get_package(db, package_id)
    lpar_count = db.query(func.count(Lpar.id)).filter(Lpar.current_package_id == package_id).scalar()
    ensure_deletable("Package", package, {"LPARs": lpar_count})
    label = f"{package.code} {package.version}"
    with atomic(db):
        snapshot = row_snapshot(package)
        snapshot["item_count"] = len(package.items)
        log_audit(db, EntityType.PACKAGE, package.id, AuditAction.DELETE, snapshot, user_id)
        db.delete(package)
    log.info(f"Deleted package {label} (id={package_id})")


# -------------- Single items --------------

def add_item(db: Session, package_id: int, data: dict, user_id: Optional[str] = None) -> PackageItem:
    package = get_package(db, package_id)
    entry = {k: v for k, v in data.items() if k in _ITEM_FIELDS}
    if any(item.software_id == entry["software_id"] for item in package.items):
        raise DuplicateError(
            f"Software {entry['software_id']} is already part of package {package_id}",
            field="software_id", value=entry["software_id"],
        )
    _assign_order([entry], taken=[item.order_index for item in package.items])
    _check_versions(db, [entry])
    _check_item_set([{k: getattr(i, k) for k in _ITEM_FIELDS} for i in package.items] + [entry])

    with atomic(db):
        item = PackageItem(package_id=package_id, **entry)
        db.add(item)
        db.flush()
        log_audit(db, EntityType.PACKAGE_ITEM, item.id, AuditAction.CREATE, row_snapshot(item), user_id)
    db.refresh(item)
    return item


def delete_item(db: Session, package_id: int, item_id: int, user_id: Optional[str] = None) -> None:
    item = get_or_404(db, PackageItem, item_id, "PackageItem")
    if item.package_id != package_id:
        raise NotFoundError(f"Item of package {package_id}", item_id)
    with atomic(db):
        log_audit(db, EntityType.PACKAGE_ITEM, item.id, AuditAction.DELETE, row_snapshot(item), user_id)
        db.delete(item)
