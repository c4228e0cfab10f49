"""
Dashboard API: chart data for the overview page.

- Task status distribution
- Tasks assigned per employee
- Record counts for the summary cards
"""
from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.schemas.task import Task
from app.services.dashboard_service import task_status_counts, tasks_per_employee
from app.store.entity_store import EntityStore

router = APIRouter()


@router.get("/summary")
def get_dashboard_summary(store: EntityStore = Depends(get_store)):
    tasks = [Task.model_validate(r) for r in store.query("tasks")]
    employees = store.query("employees")

    return {
        "taskStatus": task_status_counts(tasks),
        "staffPerformance": tasks_per_employee(employees, tasks),
        "totals": {
            "tasks": len(tasks),
            "employees": len(employees),
            "customers": len(store.query("customers")),
            "invoices": len(store.query("invoices")),
        },
    }
