"""
modules/software/models.py — ORM models for the software catalog.

Owns tables: software, software_versions
"""

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Boolean, ForeignKey, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.base import Base
from core.versions import VersionRef
from modules.vendors.models import Vendor  # noqa: F401  (relationship target)


class Software(Base):
    """
    A vendor product (CICS, Db2, IMS, ...).

    current_version_id points at one of this software's own versions; the
    application keeps it in step with SoftwareVersion.is_current.
    """
    __tablename__ = "software"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False)
    description = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    current_version_id = Column(
        Integer,
        ForeignKey("software_versions.id", use_alter=True, name="fk_software_current_version", ondelete="SET NULL"),
        nullable=True,
    )

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    vendor = relationship("Vendor", back_populates="software")
    versions = relationship(
        "SoftwareVersion",
        back_populates="software",
        foreign_keys="SoftwareVersion.software_id",
        cascade="all, delete-orphan",
        order_by="SoftwareVersion.release_date.desc()",
    )
    current_version = relationship(
        "SoftwareVersion", foreign_keys=[current_version_id], post_update=True
    )

    def __repr__(self):
        return f"<Software {self.name}>"


class SoftwareVersion(Base):
    """One released version (and PTF level) of a software product."""
    __tablename__ = "software_versions"
    __table_args__ = (
        UniqueConstraint("software_id", "version", "ptf_level", name="uq_software_version_ptf"),
    )

    id = Column(Integer, primary_key=True)
    software_id = Column(Integer, ForeignKey("software.id", ondelete="CASCADE"), nullable=False, index=True)
    version = Column(String(50), nullable=False)
    ptf_level = Column(String(50), nullable=True)
    release_date = Column(Date, nullable=True)
    end_of_support = Column(Date, nullable=True)
    release_notes = Column(Text, nullable=True)
    is_current = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, server_default=func.now())

    software = relationship("Software", back_populates="versions", foreign_keys=[software_id])

    @property
    def ref(self) -> VersionRef:
        return VersionRef(self.version, self.ptf_level or None)

    def __repr__(self):
        return f"<SoftwareVersion {self.software_id}:{self.version} {self.ptf_level or ''}>"
