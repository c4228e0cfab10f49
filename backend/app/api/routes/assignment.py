"""Smart assignment: suggest the best staff member for a task."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_advisor_client, get_store
from app.schemas.base import InputModel, RecordModel
from app.schemas.employee import Employee
from app.schemas.task import TaskPriority
from app.store.entity_store import EntityStore
from ai.groq_client import GroqClient
from ai.smart_assignment import (
    build_request,
    build_staff_snapshot,
    resolve_suggestion,
    suggest_assignee,
)

router = APIRouter()


class AssignmentRequest(InputModel):
    task_description: str
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date


class AssignmentSuggestion(RecordModel):
    suggested_staff: str
    reasoning: str
    employee: Optional[Employee] = None


@router.post("/suggest", response_model=AssignmentSuggestion)
def suggest(
    data: AssignmentRequest,
    store: EntityStore = Depends(get_store),
    client: GroqClient = Depends(get_advisor_client),
):
    """Snapshot the roster (workload + availability), ask the model, map the answer back."""
    snapshot = build_staff_snapshot(store.query("employees"))
    request = build_request(
        data.task_description,
        data.priority,
        data.due_date.isoformat(),
        snapshot,
    )
    result = suggest_assignee(request, client=client)
    employee = resolve_suggestion(snapshot, result)
    return AssignmentSuggestion(
        suggested_staff=result.suggested_staff,
        reasoning=result.reasoning,
        employee=Employee.model_validate(employee) if employee else None,
    )
