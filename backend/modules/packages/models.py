"""
modules/packages/models.py — ORM models for deployable packages.

Owns tables: packages, package_items
"""

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Boolean, ForeignKey, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.base import Base
from modules.software.models import Software, SoftwareVersion  # noqa: F401  (relationship targets)


class Package(Base):
    """A named, versioned bundle of required software versions."""
    __tablename__ = "packages"
    __table_args__ = (
        UniqueConstraint("code", "version", name="uq_package_code_version"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False)
    version = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    release_date = Column(Date, nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    items = relationship(
        "PackageItem",
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="PackageItem.order_index",
    )

    def __repr__(self):
        return f"<Package {self.code} {self.version}>"


class PackageItem(Base):
    """
    One required software version within a package.

    `required` is kept for compatibility with older packages: optional items
    are ignored when an LPAR does not have the software at all.
    """
    __tablename__ = "package_items"
    __table_args__ = (
        UniqueConstraint("package_id", "software_id", name="uq_package_item_software"),
        UniqueConstraint("package_id", "order_index", name="uq_package_item_order"),
    )

    id = Column(Integer, primary_key=True)
    package_id = Column(Integer, ForeignKey("packages.id", ondelete="CASCADE"), nullable=False, index=True)
    software_id = Column(Integer, ForeignKey("software.id"), nullable=False)
    software_version_id = Column(Integer, ForeignKey("software_versions.id"), nullable=False)
    required = Column(Boolean, nullable=False, default=True)
    order_index = Column(Integer, nullable=False, default=0)

    package = relationship("Package", back_populates="items")
    software = relationship("Software")
    software_version = relationship("SoftwareVersion")

    def __repr__(self):
        return f"<PackageItem pkg={self.package_id} sw={self.software_id} #{self.order_index}>"
