"""
modules/lpars/models.py — ORM models for LPARs and their installed software.

Owns tables: lpars, lpar_software
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, ForeignKey, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.base import Base
from core.versions import VersionRef
from modules.customers.models import Customer  # noqa: F401  (relationship target)
from modules.packages.models import Package  # noqa: F401  (relationship target)


class Lpar(Base):
    """A logical partition belonging to a customer."""
    __tablename__ = "lpars"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False, unique=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    current_package_id = Column(Integer, ForeignKey("packages.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="lpars")
    current_package = relationship("Package")
    installations = relationship(
        "LparSoftware",
        back_populates="lpar",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Lpar {self.code}>"


class LparSoftware(Base):
    """
    Software installed on an LPAR.

    Version and PTF are copied strings, not a foreign key: the row is a
    snapshot of what was installed and must survive edits to the catalog.
    """
    __tablename__ = "lpar_software"
    __table_args__ = (
        UniqueConstraint("lpar_id", "software_id", name="uq_lpar_software"),
    )

    id = Column(Integer, primary_key=True)
    lpar_id = Column(Integer, ForeignKey("lpars.id", ondelete="CASCADE"), nullable=False, index=True)
    software_id = Column(Integer, ForeignKey("software.id"), nullable=False, index=True)

    current_version = Column(String(50), nullable=False)
    current_ptf_level = Column(String(50), nullable=True)
    previous_version = Column(String(50), nullable=True)
    previous_ptf_level = Column(String(50), nullable=True)
    installed_date = Column(DateTime, server_default=func.now())

    rolled_back = Column(Boolean, nullable=False, default=False)
    rolled_back_at = Column(DateTime, nullable=True)
    rollback_reason = Column(Text, nullable=True)

    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    lpar = relationship("Lpar", back_populates="installations")
    software = relationship("Software")

    @property
    def current(self) -> VersionRef:
        return VersionRef(self.current_version, self.current_ptf_level or None)

    @property
    def previous(self):
        if not self.previous_version:
            return None
        return VersionRef(self.previous_version, self.previous_ptf_level or None)

    def __repr__(self):
        return f"<LparSoftware lpar={self.lpar_id} sw={self.software_id} {self.current_version}>"
