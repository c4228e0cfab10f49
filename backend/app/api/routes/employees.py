"""Employees: roster CRUD. Workload is derived from tasks, not edited here."""
from typing import List

from fastapi import APIRouter, Depends, status

from app.api.deps import get_store
from app.core.exceptions import BusinessError, notification
from app.schemas.employee import Employee, EmployeeCreate, EmployeeUpdate
from app.services import employee_service
from app.store.entity_store import EntityStore

router = APIRouter()


@router.get("", response_model=List[Employee])
def list_employees(store: EntityStore = Depends(get_store)):
    return employee_service.list_employees(store)


@router.post("", response_model=Employee, status_code=status.HTTP_201_CREATED)
def create_employee(data: EmployeeCreate, store: EntityStore = Depends(get_store)):
    """New employees start with workload 0 and available."""
    return employee_service.create_employee(store, data)


@router.get("/{employee_id}", response_model=Employee)
def get_employee(employee_id: str, store: EntityStore = Depends(get_store)):
    return employee_service.get_employee(store, employee_id)


@router.patch("/{employee_id}", response_model=Employee)
def update_employee(employee_id: str, data: EmployeeUpdate, store: EntityStore = Depends(get_store)):
    return employee_service.update_employee(store, employee_id, data)


@router.delete("/{employee_id}")
def delete_employee(employee_id: str, store: EntityStore = Depends(get_store)):
    if not employee_service.delete_employee(store, employee_id):
        raise BusinessError.not_found("Employee", reason=f"delete of missing employee {employee_id}")
    return notification("Employee Deleted", "The employee has been removed.", variant="default")
