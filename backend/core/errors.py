"""
core/errors.py — Domain error taxonomy.

Services raise these; the app factory maps them onto HTTP responses:

    NotFoundError   -> 404  (referenced id does not exist)
    ValidationError -> 400  (caller data violates a precondition)
    DuplicateError  -> 409  (a uniqueness rule would be violated)
    DatabaseError   -> 500  (unexpected persistence failure)
"""

from typing import Any, Optional


class InventoryError(Exception):
    """Base class for all errors surfaced by the inventory services."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        body = {"detail": self.message, "error": self.kind}
        if self.field:
            body["field"] = self.field
        return body


class NotFoundError(InventoryError):
    kind = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(InventoryError):
    kind = "validation"
    status_code = 400


class DuplicateError(InventoryError):
    kind = "duplicate"
    status_code = 409

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message, field=field)
        self.value = value

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.value is not None:
            body["value"] = self.value
        return body


class DatabaseError(InventoryError):
    kind = "database"
    status_code = 500
