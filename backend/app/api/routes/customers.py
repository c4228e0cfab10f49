"""Customers: CRUD with search, plus the per-customer services list."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_store
from app.core.exceptions import BusinessError, notification
from app.schemas.customer import Customer, CustomerCreate, CustomerUpdate
from app.schemas.invoice import ServiceLine
from app.services import customer_service
from app.services.aggregation import services_for_customer
from app.store.entity_store import EntityStore

router = APIRouter()


@router.get("", response_model=List[Customer])
def list_customers(
    search: Optional[str] = Query(None),
    search_by: str = Query("name", alias="searchBy"),
    store: EntityStore = Depends(get_store),
):
    """Customer table, optionally filtered by a substring of one field."""
    return customer_service.list_customers(store, search=search, search_by=search_by)


@router.post("", response_model=Customer, status_code=status.HTTP_201_CREATED)
def create_customer(data: CustomerCreate, store: EntityStore = Depends(get_store)):
    return customer_service.create_customer(store, data)


@router.get("/{customer_id}", response_model=Customer)
def get_customer(customer_id: str, store: EntityStore = Depends(get_store)):
    return customer_service.get_customer(store, customer_id)


@router.patch("/{customer_id}", response_model=Customer)
def update_customer(customer_id: str, data: CustomerUpdate, store: EntityStore = Depends(get_store)):
    return customer_service.update_customer(store, customer_id, data)


@router.delete("/{customer_id}")
def delete_customer(customer_id: str, store: EntityStore = Depends(get_store)):
    """Delete the customer only. Their invoices stay, referencing a missing customer."""
    if not customer_service.delete_customer(store, customer_id):
        raise BusinessError.not_found("Customer", reason=f"delete of missing customer {customer_id}")
    return notification("Customer Deleted", "The customer has been deleted.", variant="default")


@router.get("/{customer_id}/services", response_model=List[ServiceLine])
def list_customer_services(customer_id: str, store: EntityStore = Depends(get_store)):
    """Every line item across the customer's invoices, tagged with invoice id and slot."""
    return services_for_customer(customer_id, store.query("invoices"))
