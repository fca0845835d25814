"""
modules/activity/services.py — Read-only queries over the audit log and
the inventory for the activity feed and dashboard.
"""

from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from core.base import AuditAction, EntityType
from core.config import settings
from core.models import AuditLog
from core.pagination import PageParams, paginate
from modules.customers.models import Customer
from modules.lpars.models import Lpar, LparSoftware
from modules.packages.models import Package
from modules.software.models import Software, SoftwareVersion
from modules.vendors.models import Vendor

RECENT_LIMIT = 5


def list_audit_logs(
    db: Session,
    page: PageParams,
    entity_type: Optional[str] = None,
    action: Optional[str] = None,
    entity_id: Optional[int] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
):
    """Newest first; returns (rows, total)."""
    query = db.query(AuditLog)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if action:
        query = query.filter(AuditLog.action == action)
    if entity_id is not None:
        query = query.filter(AuditLog.entity_id == entity_id)
    if date_from:
        query = query.filter(AuditLog.timestamp >= date_from)
    if date_to:
        query = query.filter(AuditLog.timestamp <= date_to)
    return paginate(query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()), page)


def audit_filter_values(db: Session) -> dict:
    """Distinct entity types and actions present in the log, for filter dropdowns."""
    entity_types = [r[0] for r in db.query(AuditLog.entity_type).distinct().order_by(AuditLog.entity_type)]
    actions = [r[0] for r in db.query(AuditLog.action).distinct().order_by(AuditLog.action)]
    return {"entity_types": entity_types, "actions": actions}


def active_counts(db: Session) -> dict:
    return {
        "vendors": db.query(Vendor).filter(Vendor.active.is_(True)).count(),
        "customers": db.query(Customer).filter(Customer.active.is_(True)).count(),
        "software": db.query(Software).filter(Software.active.is_(True)).count(),
        "packages": db.query(Package).filter(Package.active.is_(True)).count(),
        "lpars": db.query(Lpar).filter(Lpar.active.is_(True)).count(),
    }


def recent_deployments(db: Session, limit: int = RECENT_LIMIT) -> list:
    return (
        db.query(AuditLog)
        .filter(
            AuditLog.entity_type == EntityType.LPAR.value,
            AuditLog.action == AuditAction.DEPLOY.value,
        )
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )


def recent_rollbacks(db: Session, limit: int = RECENT_LIMIT) -> list:
    rows = (
        db.query(LparSoftware)
        .filter(LparSoftware.rolled_back.is_(True))
        .order_by(LparSoftware.rolled_back_at.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "lpar_id": row.lpar_id,
            "lpar_code": row.lpar.code,
            "software_id": row.software_id,
            "software_name": row.software.name,
            "version": row.current_version,
            "ptf_level": row.current_ptf_level,
            "rolled_back_at": row.rolled_back_at,
            "reason": row.rollback_reason,
        }
        for row in rows
    ]


def end_of_support_alerts(db: Session, today: Optional[date] = None, window_days: Optional[int] = None) -> list:
    """Current versions whose support ends between today and today + window, soonest first."""
    today = today or date.today()
    if window_days is None:
        window_days = settings.end_of_support_window_days
    horizon = today + timedelta(days=window_days)

    rows = (
        db.query(SoftwareVersion)
        .join(Software, Software.current_version_id == SoftwareVersion.id)
        .filter(
            Software.active.is_(True),
            SoftwareVersion.end_of_support.isnot(None),
            SoftwareVersion.end_of_support >= today,
            SoftwareVersion.end_of_support <= horizon,
        )
        .order_by(SoftwareVersion.end_of_support)
        .all()
    )
    return [
        {
            "software_id": v.software_id,
            "software_name": v.software.name,
            "version_id": v.id,
            "version": v.version,
            "ptf_level": v.ptf_level,
            "end_of_support": v.end_of_support,
            "days_left": (v.end_of_support - today).days,
        }
        for v in rows
    ]


def dashboard(db: Session) -> dict:
    return {
        "counts": active_counts(db),
        "recent_deployments": recent_deployments(db),
        "recent_rollbacks": recent_rollbacks(db),
        "end_of_support": end_of_support_alerts(db),
    }
