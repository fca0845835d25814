"""Activity routes — audit log feed and dashboard."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.db import get_db
from core.pagination import PageParams, page_params, page_response
from modules.activity import services
from modules.activity.schemas import AuditLogPage, AuditLogResponse, Dashboard

router = APIRouter(tags=["Activity"])


@router.get("/audit-logs", response_model=AuditLogPage)
def list_audit_logs(
    entity_type: Optional[str] = None,
    action: Optional[str] = None,
    entity_id: Optional[int] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    page: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    """Audit entries, newest first, with the values available for filtering."""
    rows, total = services.list_audit_logs(
        db, page,
        entity_type=entity_type,
        action=action,
        entity_id=entity_id,
        date_from=date_from,
        date_to=date_to,
    )
    body = page_response(rows, total, page, AuditLogResponse)
    body.update(services.audit_filter_values(db))
    return body


@router.get("/dashboard", response_model=Dashboard)
def dashboard(db: Session = Depends(get_db)):
    return services.dashboard(db)
