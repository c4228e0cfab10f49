"""
Tasks and the workload figures derived from them.

Employee.workload is not maintained atomically: after every task mutation
sync_workloads() recounts open tasks per assignee and writes back only the
employees whose count changed.
"""
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from app.core.exceptions import DocumentNotFound, ValidationFailed
from app.schemas.task import OPEN_STATUSES, Task, TaskCreate, TaskStatus, TaskUpdate, TaskView
from app.store.entity_store import EntityStore

logger = logging.getLogger(__name__)

TASKS = "tasks"


def _require(store: EntityStore, collection: str, doc_id: Optional[str], label: str) -> None:
    if not doc_id:
        return
    try:
        store.get(collection, doc_id)
    except DocumentNotFound:
        raise ValidationFailed(f"{label} {doc_id} does not exist")


def create_task(store: EntityStore, data: TaskCreate) -> Task:
    _require(store, "customers", data.customer_id, "Customer")
    _require(store, "employees", data.assignee_id, "Employee")
    _require(store, "invoices", data.invoice_id, "Invoice")

    record = data.to_record()
    record.update(
        status=TaskStatus.TODO.value,
        createdAt=datetime.now(timezone.utc).isoformat(),
        dueDate=data.due_date.isoformat() if data.due_date else "",
    )
    task_id = store.create(TASKS, record)
    sync_workloads(store)
    return Task.model_validate(store.get(TASKS, task_id))


def update_task(store: EntityStore, task_id: str, data: TaskUpdate) -> Task:
    changes = data.model_dump(by_alias=True, exclude_unset=True, exclude_none=True, mode="json")
    if not changes:
        raise ValidationFailed("Nothing to update")
    _require(store, "customers", data.customer_id, "Customer")
    _require(store, "employees", data.assignee_id, "Employee")
    store.update(TASKS, task_id, changes, merge=True)
    sync_workloads(store)
    return Task.model_validate(store.get(TASKS, task_id))


def delete_task(store: EntityStore, task_id: str) -> bool:
    deleted = store.delete(TASKS, task_id)
    if deleted:
        sync_workloads(store)
    return deleted


def list_tasks(store: EntityStore, title: Optional[str] = None) -> List[Task]:
    predicate = None
    if title:
        needle = title.strip().lower()
        predicate = lambda r: needle in str(r.get("title") or "").lower()  # noqa: E731
    return [Task.model_validate(r) for r in store.query(TASKS, predicate)]


def _names_by_id(records: Iterable[Dict[str, Any]]) -> Dict[str, str]:
    return {r["id"]: r.get("name", "") for r in records}


def resolve_tasks(
    tasks: Iterable[Task],
    customers: Iterable[Dict[str, Any]],
    employees: Iterable[Dict[str, Any]],
) -> List[TaskView]:
    """Attach display names, looked up by id; legacy name-only tasks show their stored text."""
    customer_names = _names_by_id(customers)
    employee_names = _names_by_id(employees)
    views = []
    for task in tasks:
        views.append(
            TaskView(
                **task.model_dump(),
                customer_name=customer_names.get(task.customer_id or "", task.customer or ""),
                assignee_name=employee_names.get(task.assignee_id or "", task.assignee or ""),
            )
        )
    return views


def derive_workloads(employees: Iterable[Dict[str, Any]], tasks: Iterable[Task]) -> Dict[str, int]:
    """Open (Todo / In Progress) task count per employee id."""
    open_counts = Counter(
        t.assignee_id for t in tasks if t.assignee_id and t.status in OPEN_STATUSES
    )
    return {e["id"]: open_counts.get(e["id"], 0) for e in employees}


def sync_workloads(store: EntityStore) -> Dict[str, int]:
    employees = store.query("employees")
    tasks = [Task.model_validate(r) for r in store.query(TASKS)]
    workloads = derive_workloads(employees, tasks)
    for employee in employees:
        workload = workloads[employee["id"]]
        if employee.get("workload") != workload:
            store.update("employees", employee["id"], {"workload": workload}, merge=True)
            logger.debug(f"Employee {employee['id']} workload -> {workload}")
    return workloads
