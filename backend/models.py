"""
Database models for the LPAR inventory.

Core entities:
- Vendor / Software / SoftwareVersion: the vendor product catalog
- Package / PackageItem: versioned bundles of required software versions
- Customer / Lpar: partitions, each owned by one customer
- LparSoftware: what is installed on an LPAR (snapshot strings)
- AuditLog: append-only change history

Every table is defined in its owning module and created through
Base.metadata.create_all; importing this module registers all of them.
"""

from core.base import Base  # noqa: F401
from core.models import AuditLog  # noqa: F401
from modules.vendors.models import Vendor  # noqa: F401
from modules.customers.models import Customer  # noqa: F401
from modules.software.models import Software, SoftwareVersion  # noqa: F401
from modules.packages.models import Package, PackageItem  # noqa: F401
from modules.lpars.models import Lpar, LparSoftware  # noqa: F401
