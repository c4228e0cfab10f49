"""Dashboard figures: task status distribution and tasks per employee."""
from collections import Counter
from typing import Any, Dict, Iterable, List

from app.schemas.task import Task


def task_status_counts(tasks: Iterable[Task]) -> List[Dict[str, Any]]:
    """[{name: status, value: count}] in first-seen order, statuses with no tasks omitted."""
    counts = Counter(t.status.value for t in tasks)
    return [{"name": status, "value": count} for status, count in counts.items()]


def tasks_per_employee(employees: Iterable[Dict[str, Any]], tasks: Iterable[Task]) -> List[Dict[str, Any]]:
    """Assigned task count (any status) per employee, labelled with the first name."""
    tasks = list(tasks)
    rows = []
    for employee in employees:
        name = employee.get("name", "")
        assigned = sum(
            1 for t in tasks
            if t.assignee_id == employee["id"] or (not t.assignee_id and t.assignee == name)
        )
        rows.append(
            {
                "employeeId": employee["id"],
                "name": name.split(" ")[0] if name else "",
                "tasks": assigned,
            }
        )
    return rows
