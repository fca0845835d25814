"""
modules/system/schemas.py — Pydantic schemas for the system domain.
"""

from typing import List, Optional

from pydantic import BaseModel


class HealthCheck(BaseModel):
    status: str
    version: str
    database: str
    database_ok: bool
    modules: List[str] = []
    environment: Optional[str] = None
