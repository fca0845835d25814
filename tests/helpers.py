"""
Shared test helpers — build inventory rows through the services so every
fixture goes through the same validation and audit path as real callers.
"""

from types import SimpleNamespace

from core.models import AuditLog
from modules.customers import services as customers
from modules.lpars import services as lpars
from modules.packages import services as packages
from modules.software import services as software
from modules.vendors import services as vendors


def make_vendor(db, code="IBM", name="IBM Corporation", **extra):
    return vendors.create_vendor(db, {"name": name, "code": code, **extra})


def make_customer(db, code="ACME", name="Acme Bank", **extra):
    return customers.create_customer(db, {"name": name, "code": code, **extra})


def make_software(db, vendor, name, versions=(), current=None):
    """Create software with versions given as (version, ptf_level) pairs.

    ``current`` names the version string to mark current. Returns the
    software and a {version: SoftwareVersion} map.
    """
    sw = software.create_software(db, {"name": name, "vendor_id": vendor.id})
    by_version = {}
    for version, ptf in versions:
        by_version[version] = software.add_version(
            db, sw.id,
            {"version": version, "ptf_level": ptf, "is_current": version == current},
        )
    db.refresh(sw)
    return sw, by_version


def make_lpar(db, customer, code="PROD1", name="Production 1", **extra):
    return lpars.create_lpar(db, {"name": name, "code": code, "customer_id": customer.id, **extra})


def make_package(db, code, version, entries, name=None, **extra):
    """``entries`` is a list of (software, SoftwareVersion) pairs, in order."""
    items = [
        {"software_id": sw.id, "software_version_id": v.id, "required": True}
        for sw, v in entries
    ]
    data = {"name": name or f"{code} package", "code": code, "version": version, **extra}
    return packages.create_package(db, data, items)


def audit_entries(db, entity_type=None, action=None, entity_id=None):
    query = db.query(AuditLog)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if action:
        query = query.filter(AuditLog.action == action)
    if entity_id is not None:
        query = query.filter(AuditLog.entity_id == entity_id)
    return query.order_by(AuditLog.id).all()


def seed_mainframe(db):
    ibm = make_vendor(db)
    cics, cics_v = make_software(
        db, ibm, "CICS Transaction Server",
        versions=[("V5R5M0", None), ("V5R6M0", "UI12345")], current="V5R6M0",
    )
    db2, db2_v = make_software(
        db, ibm, "DB2 for z/OS",
        versions=[("12.1", None), ("13.1", "PH54321")], current="13.1",
    )
    acme = make_customer(db)
    prod = make_lpar(db, acme)
    pkg = make_package(
        db, "ZBASE", "2024.1",
        [(cics, cics_v["V5R6M0"]), (db2, db2_v["13.1"])],
        name="z/OS base stack",
    )
    return SimpleNamespace(
        vendor=ibm, customer=acme, lpar=prod, package=pkg,
        cics=cics, cics_versions=cics_v, db2=db2, db2_versions=db2_v,
    )
