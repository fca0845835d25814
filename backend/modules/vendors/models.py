"""
modules/vendors/models.py — ORM models for the vendors domain.

Owns tables: vendors
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.base import Base


class Vendor(Base):
    """A software vendor (IBM, Broadcom, BMC, ...)."""
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False, unique=True)
    website = Column(String(500), nullable=True)
    contact_email = Column(String(255), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    software = relationship("Software", back_populates="vendor", order_by="Software.name")

    def __repr__(self):
        return f"<Vendor {self.code}>"
