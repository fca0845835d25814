"""
core/base.py — Declarative Base and shared enums.

All ORM models import Base from here.
All shared enums (used across multiple domain modules) live here
to avoid circular imports between domain modules.
"""

from enum import Enum
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# SQLAlchemy 2.x defaults to using enum member NAMES as DB values.
# We want member VALUES (lowercase strings) instead.
_ENUM_VALUES = lambda x: [e.value for e in x]


class EntityType(str, Enum):
    """Entity tags recorded on audit log entries."""
    CUSTOMER = "customer"
    VENDOR = "vendor"
    SOFTWARE = "software"
    SOFTWARE_VERSION = "software_version"
    PACKAGE = "package"
    PACKAGE_ITEM = "package_item"
    LPAR = "lpar"
    LPAR_SOFTWARE = "lpar_software"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ROLLBACK = "rollback"
    VERSION_UPDATE = "version_update"
    CLONE = "clone"
    DEPLOY = "deploy"


class ComplianceStatus(str, Enum):
    """Per-item compliance classification, ordered by severity (see PRIORITY)."""
    MISSING = "missing"
    ROLLED_BACK = "rolled_back"
    VERSION_MISMATCH = "version_mismatch"
    PTF_MISMATCH = "ptf_mismatch"
    COMPLIANT = "compliant"

    @property
    def priority(self) -> int:
        return COMPLIANCE_PRIORITY[self]


# 1 = most severe. Used to pick the single worst status for an LPAR.
COMPLIANCE_PRIORITY = {
    ComplianceStatus.MISSING: 1,
    ComplianceStatus.ROLLED_BACK: 2,
    ComplianceStatus.VERSION_MISMATCH: 3,
    ComplianceStatus.PTF_MISMATCH: 4,
    ComplianceStatus.COMPLIANT: 5,
}


class ChangeKind(str, Enum):
    """What a deployment would do to a single installed software."""
    INSTALL = "install"
    UPGRADE = "upgrade"
    DOWNGRADE = "downgrade"
    NO_CHANGE = "no_change"


# Codes are uppercase alphanumeric with dashes/underscores
CODE_PATTERN = r"^[A-Z0-9_-]+$"

FIELD_LENGTHS = {
    "name": (2, 100),
    "code": (2, 20),
    "description": (0, 500),
    "version": (1, 50),
    "ptf_level": (0, 50),
    "email": (0, 255),
    "url": (0, 500),
}
