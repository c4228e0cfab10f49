"""Tasks: list (with names resolved), create, update, delete."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_store
from app.core.exceptions import BusinessError, notification
from app.schemas.task import TaskCreate, TaskUpdate, TaskView
from app.services import task_service
from app.store.entity_store import EntityStore

router = APIRouter()


def _view(store: EntityStore, tasks) -> List[TaskView]:
    return task_service.resolve_tasks(tasks, store.query("customers"), store.query("employees"))


@router.get("", response_model=List[TaskView])
def list_tasks(title: Optional[str] = Query(None), store: EntityStore = Depends(get_store)):
    """Task table; `title` filters by substring."""
    return _view(store, task_service.list_tasks(store, title=title))


@router.post("", response_model=TaskView, status_code=status.HTTP_201_CREATED)
def create_task(data: TaskCreate, store: EntityStore = Depends(get_store)):
    task = task_service.create_task(store, data)
    return _view(store, [task])[0]


@router.patch("/{task_id}", response_model=TaskView)
def update_task(task_id: str, data: TaskUpdate, store: EntityStore = Depends(get_store)):
    task = task_service.update_task(store, task_id, data)
    return _view(store, [task])[0]


@router.delete("/{task_id}")
def delete_task(task_id: str, store: EntityStore = Depends(get_store)):
    if not task_service.delete_task(store, task_id):
        raise BusinessError.not_found("Task", reason=f"delete of missing task {task_id}")
    return notification("Task Deleted", "The task has been deleted.", variant="default")
