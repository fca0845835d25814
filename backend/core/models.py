"""
core/models.py — Core ORM models.

Owns tables: audit_log
"""

from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Integer, JSON

from core.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class AuditLog(Base):
    """Append-only record of every state-changing operation."""
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, default=_utcnow, nullable=False, index=True)
    entity_type = Column(String(50), nullable=False, index=True)  # e.g. "lpar", "package"
    entity_id = Column(Integer, nullable=False, index=True)
    action = Column(String(50), nullable=False, index=True)  # e.g. "create", "deploy", "rollback"
    changes = Column(JSON)
    user_id = Column(String(100), nullable=True)

    def __repr__(self):
        return f"<AuditLog {self.action} {self.entity_type}:{self.entity_id}>"
