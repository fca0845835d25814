"""Customer CRUD routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.audit import get_actor
from core.db import get_db
from core.pagination import PageParams, page_params, page_response
from modules.customers import services
from modules.customers.schemas import (
    CustomerCreate, CustomerDetail, CustomerPage, CustomerResponse, CustomerUpdate,
)

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("", response_model=CustomerPage)
def list_customers(
    active: Optional[bool] = None,
    q: Optional[str] = None,
    page: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
):
    rows, total = services.list_customers(db, page, active=active, q=q)
    return page_response(rows, total, page, CustomerResponse)


@router.get("/{customer_id}", response_model=CustomerDetail)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    """Customer with its LPARs."""
    return services.get_customer(db, customer_id)


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(data: CustomerCreate, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    return services.create_customer(db, data.model_dump(), actor)


@router.patch("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    actor: Optional[str] = Depends(get_actor),
    db: Session = Depends(get_db),
):
    return services.update_customer(db, customer_id, data.model_dump(exclude_unset=True), actor)


@router.post("/{customer_id}/deactivate", response_model=CustomerResponse)
def deactivate_customer(customer_id: int, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    """Deactivate a customer and all of its LPARs."""
    return services.deactivate_customer(db, customer_id, actor)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: int, actor: Optional[str] = Depends(get_actor), db: Session = Depends(get_db)):
    services.delete_customer(db, customer_id, actor)
