"""Employee roster."""
import logging
from typing import List

from app.core.exceptions import ValidationFailed
from app.schemas.employee import Employee, EmployeeCreate, EmployeeUpdate
from app.services.customer_service import next_avatar
from app.store.entity_store import EntityStore

logger = logging.getLogger(__name__)

EMPLOYEES = "employees"


def create_employee(store: EntityStore, data: EmployeeCreate) -> Employee:
    existing = store.query(EMPLOYEES)
    record = data.to_record()
    record.update(
        avatar=next_avatar(len(existing)),
        workload=0,
        availability=True,
    )
    employee_id = store.create(EMPLOYEES, record)
    logger.info(f"Employee {employee_id} added")
    return Employee.model_validate(store.get(EMPLOYEES, employee_id))


def get_employee(store: EntityStore, employee_id: str) -> Employee:
    return Employee.model_validate(store.get(EMPLOYEES, employee_id))


def update_employee(store: EntityStore, employee_id: str, data: EmployeeUpdate) -> Employee:
    changes = data.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationFailed("Nothing to update")
    store.update(EMPLOYEES, employee_id, changes, merge=True)
    return get_employee(store, employee_id)


def delete_employee(store: EntityStore, employee_id: str) -> bool:
    return store.delete(EMPLOYEES, employee_id)


def list_employees(store: EntityStore) -> List[Employee]:
    return [Employee.model_validate(r) for r in store.query(EMPLOYEES)]
