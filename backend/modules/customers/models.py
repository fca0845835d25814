"""
modules/customers/models.py — ORM models for the customers domain.

Owns tables: customers
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.base import Base


class Customer(Base):
    """A customer operating one or more LPARs."""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    lpars = relationship("Lpar", back_populates="customer", order_by="Lpar.name")

    def __repr__(self):
        return f"<Customer {self.code}>"
