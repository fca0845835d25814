"""
modules/activity/schemas.py — Audit log and dashboard responses.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    timestamp: datetime
    entity_type: str
    entity_id: int
    action: str
    changes: Optional[Dict[str, Any]] = None
    user_id: Optional[str] = None


class AuditLogPage(BaseModel):
    items: List[AuditLogResponse]
    total: int
    limit: int
    offset: int
    entity_types: List[str]
    actions: List[str]


class ActiveCounts(BaseModel):
    vendors: int
    customers: int
    software: int
    packages: int
    lpars: int


class RecentRollback(BaseModel):
    lpar_id: int
    lpar_code: str
    software_id: int
    software_name: str
    version: str
    ptf_level: Optional[str] = None
    rolled_back_at: Optional[datetime] = None
    reason: Optional[str] = None


class EndOfSupportAlert(BaseModel):
    software_id: int
    software_name: str
    version_id: int
    version: str
    ptf_level: Optional[str] = None
    end_of_support: date
    days_left: int


class Dashboard(BaseModel):
    counts: ActiveCounts
    recent_deployments: List[AuditLogResponse]
    recent_rollbacks: List[RecentRollback]
    end_of_support: List[EndOfSupportAlert]
