"""
Tasks reference their customer and assignee by id (customerId, assigneeId).
Names are resolved at display time, so renaming an employee never leaves a
task pointing at a stale name. Older records that only carry the free-text
`customer` / `assignee` names are still readable and display that text.
"""
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import field_validator

from app.schemas.base import InputModel, RecordModel, clean_text


class TaskPriority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TaskStatus(str, Enum):
    TODO = "Todo"
    IN_PROGRESS = "In Progress"
    DONE = "Done"
    CANCELED = "Canceled"


OPEN_STATUSES = (TaskStatus.TODO, TaskStatus.IN_PROGRESS)


class Task(RecordModel):
    id: str
    title: str
    description: Optional[str] = None
    customer_id: Optional[str] = None
    assignee_id: Optional[str] = None
    invoice_id: Optional[str] = None
    # legacy free-text references
    customer: Optional[str] = None
    assignee: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    created_at: str
    due_date: str = ""


class TaskView(Task):
    customer_name: str = ""
    assignee_name: str = ""


class TaskCreate(InputModel):
    title: str
    description: Optional[str] = None
    customer_id: Optional[str] = None
    assignee_id: Optional[str] = None
    invoice_id: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Task title is required")
        return v


class TaskUpdate(InputModel):
    title: Optional[str] = None
    description: Optional[str] = None
    customer_id: Optional[str] = None
    assignee_id: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = clean_text(v)
        if not v:
            raise ValueError("Task title cannot be empty")
        return v
