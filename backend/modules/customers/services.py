"""
modules/customers/services.py — Customer management.

Deactivating a customer deactivates its LPARs in the same transaction.
"""

import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.audit import apply_changes, log_audit, row_snapshot
from core.base import AuditAction, EntityType
from core.db import atomic, ensure_unique, get_or_404
from core.lifecycle import cascade_deactivate, ensure_deletable
from core.pagination import PageParams, paginate
from modules.customers.models import Customer

log = logging.getLogger("inventory.api")


def get_customer(db: Session, customer_id: int) -> Customer:
    return get_or_404(db, Customer, customer_id, "Customer")


def list_customers(
    db: Session,
    page: PageParams,
    active: Optional[bool] = None,
    q: Optional[str] = None,
):
    query = db.query(Customer)
    if active is not None:
        query = query.filter(Customer.active == active)
    if q:
        pattern = f"%{q}%"
        query = query.filter(or_(Customer.name.ilike(pattern), Customer.code.ilike(pattern)))
    return paginate(query.order_by(Customer.name), page)


def create_customer(db: Session, data: dict, user_id: Optional[str] = None) -> Customer:
    ensure_unique(db, Customer, "Customer code", code=data["code"])
    with atomic(db):
        customer = Customer(**data)
        db.add(customer)
        db.flush()
        log_audit(db, EntityType.CUSTOMER, customer.id, AuditAction.CREATE, row_snapshot(customer), user_id)
    db.refresh(customer)
    log.info(f"Created customer {customer.code} (id={customer.id})")
    return customer


def update_customer(db: Session, customer_id: int, data: dict, user_id: Optional[str] = None) -> Customer:
    """Update scalar fields; switching ``active`` off cascades to the customer's LPARs."""
    customer = get_customer(db, customer_id)
    if data.get("code") and data["code"] != customer.code:
        ensure_unique(db, Customer, "Customer code", exclude_id=customer.id, code=data["code"])

    with atomic(db):
        was_active = customer.active
        changes = apply_changes(customer, data)
        if was_active and not customer.active:
            lpars = cascade_deactivate(customer.lpars)
            for lpar in lpars:
                log_audit(
                    db, EntityType.LPAR, lpar.id, AuditAction.UPDATE,
                    {"active": {"old": True, "new": False}, "cascade_from": f"customer:{customer.id}"},
                    user_id,
                )
            changes["cascaded_lpars"] = len(lpars)
        if changes:
            log_audit(db, EntityType.CUSTOMER, customer.id, AuditAction.UPDATE, changes, user_id)
    db.refresh(customer)
    return customer


def deactivate_customer(db: Session, customer_id: int, user_id: Optional[str] = None) -> Customer:
    return update_customer(db, customer_id, {"active": False}, user_id)


def delete_customer(db: Session, customer_id: int, user_id: Optional[str] = None) -> None:
    """Hard delete: customer must be inactive and own no LPARs."""
    customer = get_customer(db, customer_id)
    ensure_deletable("Customer", customer, {"LPARs": len(customer.lpars)})
    code = customer.code
    with atomic(db):
        log_audit(db, EntityType.CUSTOMER, customer.id, AuditAction.DELETE, row_snapshot(customer), user_id)
        db.delete(customer)
    log.info(f"Deleted customer {code} (id={customer_id})")
