"""
Smart task assignment: suggest a staff member for a task.

All of the choosing happens in the external model. This module only:
1. Builds the staff snapshot (workload + availability, keyed by staff name)
2. Sends it with the task details
3. Validates the answer against SmartTaskOutput
4. Maps the suggested key back to an employee record for display

Snapshot keys are employee names. When two employees share a name, both
get a "Name (id)" key instead, so every key maps to exactly one employee.
"""

import logging
import time
from collections import Counter
from typing import Any, Dict, Iterable, NamedTuple, Optional

from pydantic import ValidationError

from app.core.audit import AuditLog
from app.core.exceptions import AdvisorError, InvalidResponseShape, ValidationFailed

from .advisor_schema import SmartTaskInput, SmartTaskOutput
from .groq_client import GroqClient, get_groq_client
from .output_parser import parse_and_validate
from .prompts import build_assignment_messages

logger = logging.getLogger(__name__)

FLOW = "smart_assignment"


class StaffSnapshot(NamedTuple):
    workload: Dict[str, int]
    availability: Dict[str, bool]
    employees_by_key: Dict[str, Dict[str, Any]]


def build_staff_snapshot(employees: Iterable[Dict[str, Any]]) -> StaffSnapshot:
    employees = list(employees)
    name_counts = Counter(e.get("name", "") for e in employees)

    workload: Dict[str, int] = {}
    availability: Dict[str, bool] = {}
    by_key: Dict[str, Dict[str, Any]] = {}
    for employee in employees:
        name = employee.get("name", "")
        key = name if name_counts[name] == 1 else f"{name} ({employee['id']})"
        workload[key] = int(employee.get("workload") or 0)
        availability[key] = bool(employee.get("availability", True))
        by_key[key] = employee
    return StaffSnapshot(workload, availability, by_key)


def build_request(
    task_description: str,
    priority: str,
    due_date: str,
    snapshot: StaffSnapshot,
) -> SmartTaskInput:
    try:
        return SmartTaskInput(
            task_description=task_description,
            priority=priority,
            due_date=due_date,
            staff_workload=snapshot.workload,
            staff_availability=snapshot.availability,
        )
    except ValidationError as e:
        raise ValidationFailed(e.errors()[0]["msg"]) from e


def suggest_assignee(request: SmartTaskInput, client: Optional[GroqClient] = None) -> SmartTaskOutput:
    """Ask the model for a suggestion; InvalidResponseShape if nothing valid comes back."""
    client = client or get_groq_client()
    if not client.is_available():
        AuditLog.log_advisor_call(FLOW, False, reason="client unavailable")
        raise AdvisorError("Smart assignment is not configured")

    started = time.perf_counter()
    raw = client.complete_json(build_assignment_messages(request))
    elapsed_ms = (time.perf_counter() - started) * 1000

    result = parse_and_validate(raw, SmartTaskOutput)
    if result is None:
        AuditLog.log_advisor_call(FLOW, False, elapsed_ms, reason="response failed validation")
        raise InvalidResponseShape("The assistant's answer could not be read as {suggestedStaff, reasoning}")

    AuditLog.log_advisor_call(FLOW, True, elapsed_ms)
    logger.info(f"Suggested assignee: {result.suggested_staff}")
    return result


def resolve_suggestion(snapshot: StaffSnapshot, result: SmartTaskOutput) -> Optional[Dict[str, Any]]:
    """Employee record behind the suggested key, or None if the model named someone unknown."""
    employee = snapshot.employees_by_key.get(result.suggested_staff)
    if employee is not None:
        return employee
    wanted = result.suggested_staff.strip().lower()
    matches = [e for k, e in snapshot.employees_by_key.items() if k.lower() == wanted]
    if len(matches) == 1:
        return matches[0]
    logger.info(f"Suggested staff '{result.suggested_staff}' matches no employee")
    return None
