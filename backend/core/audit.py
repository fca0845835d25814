"""
LPAR Inventory — Audit sink.

log_audit() appends an AuditLog row to the caller's session without
committing, so the entry lands in the same transaction as the change it
describes. Entries are never updated or deleted.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union

from fastapi import Header
from sqlalchemy.orm import Session

from core.base import AuditAction, EntityType
from core.models import AuditLog

log = logging.getLogger("inventory.audit")


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        return value.value
    return value


def row_snapshot(obj) -> dict:
    """Column values of an ORM row as a JSON-friendly dict."""
    return {c.name: _jsonable(getattr(obj, c.name)) for c in obj.__table__.columns}


def log_audit(
    db: Session,
    entity_type: Union[EntityType, str],
    entity_id: int,
    action: Union[AuditAction, str],
    changes: Optional[dict] = None,
    user_id: Optional[str] = None,
) -> AuditLog:
    """Append an audit entry to the current transaction."""
    entry = AuditLog(
        entity_type=EntityType(entity_type).value,
        entity_id=entity_id,
        action=AuditAction(action).value,
        changes=_jsonable(changes or {}),
        user_id=user_id,
    )
    db.add(entry)
    log.debug(f"audit {entry.action} {entry.entity_type}:{entity_id}")
    return entry


def get_actor(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """FastAPI dependency: acting user id from the optional X-User-Id header."""
    return x_user_id or None


def apply_changes(obj, data: dict) -> dict:
    """Set attributes from ``data`` and return {field: {"old", "new"}} for those that changed."""
    changes = {}
    for field, new in data.items():
        old = getattr(obj, field)
        if old != new:
            changes[field] = {"old": _jsonable(old), "new": _jsonable(new)}
            setattr(obj, field, new)
    return changes
