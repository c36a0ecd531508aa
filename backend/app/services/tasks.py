"""Unit task helpers: table resolution, derived overdue status and metrics."""

from datetime import datetime
from typing import Any, Iterable, Optional
from uuid import UUID

from app.models.enums import TaskStatus, StaffUnit, TASK_TYPES
from app.models.task import TASK_MODELS


class UnknownUnitError(LookupError):
    """Unit has no task table."""


class TaskValidationError(ValueError):
    """Task payload is not valid for the unit."""


def task_model(unit: StaffUnit):
    """Model class backing a unit's tasks."""
    try:
        return TASK_MODELS[unit]
    except KeyError:
        raise UnknownUnitError(f"The {unit.value} unit has no task list")


def validate_task_type(unit: StaffUnit, task_type: str) -> None:
    if task_type not in TASK_TYPES.get(unit, ()):
        raise TaskValidationError(
            f"Invalid task type '{task_type}' for the {unit.value} unit"
        )


def effective_status(task, now: Optional[datetime] = None) -> TaskStatus:
    """Status as reported to clients: open tasks past due read as overdue."""
    now = now or datetime.utcnow()
    if task.status == TaskStatus.COMPLETED:
        return TaskStatus.COMPLETED
    if task.due_date is not None and task.due_date < now:
        return TaskStatus.OVERDUE
    return task.status


def apply_task_changes(task, changes: dict[str, Any], now: Optional[datetime] = None) -> None:
    """Apply an update, stamping completion when a task is completed."""
    now = now or datetime.utcnow()
    new_status = changes.get("status")

    for field, value in changes.items():
        setattr(task, field, value)

    if new_status == TaskStatus.COMPLETED:
        if task.completed_at is None:
            task.completed_at = now
        if "progress_percentage" not in changes:
            task.progress_percentage = 100
    elif new_status is not None:
        task.completed_at = None


def _staff_metrics(member, tasks: list, now: datetime) -> dict[str, Any]:
    statuses = [effective_status(t, now) for t in tasks]
    completed = [t for t, s in zip(tasks, statuses) if s == TaskStatus.COMPLETED]

    with_dates = [t for t in completed if t.completed_at and t.created_at]
    avg_days = 0.0
    if with_dates:
        total_days = sum(max((t.completed_at - t.created_at).days, 0) for t in with_dates)
        avg_days = total_days / len(with_dates)

    with_due = [t for t in completed if t.due_date and t.completed_at]
    on_time_rate = 100.0
    if with_due:
        on_time = sum(1 for t in with_due if t.completed_at <= t.due_date)
        on_time_rate = on_time / len(with_due) * 100

    total = len(tasks)
    return {
        "staff_id": member.id,
        "staff_name": member.full_name,
        "staff_email": member.email,
        "total_tasks": total,
        "completed_tasks": len(completed),
        "pending_tasks": statuses.count(TaskStatus.PENDING),
        "in_progress_tasks": statuses.count(TaskStatus.IN_PROGRESS),
        "overdue_tasks": statuses.count(TaskStatus.OVERDUE),
        "completion_rate": len(completed) / total * 100 if total else 0.0,
        "average_completion_days": round(avg_days, 1),
        "on_time_rate": round(on_time_rate, 1),
    }


def compute_task_metrics(
    tasks: Iterable,
    staff: Iterable,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Per-staff performance sorted by completion rate, plus unit totals."""
    now = now or datetime.utcnow()
    tasks = list(tasks)

    by_assignee: dict[UUID, list] = {}
    for task in tasks:
        by_assignee.setdefault(task.assigned_to, []).append(task)

    rows = [_staff_metrics(m, by_assignee.get(m.id, []), now) for m in staff]
    rows.sort(key=lambda r: r["completion_rate"], reverse=True)

    statuses = [effective_status(t, now) for t in tasks]
    total = len(tasks)
    completed = statuses.count(TaskStatus.COMPLETED)
    return {
        "staff": rows,
        "total_tasks": total,
        "completed_tasks": completed,
        "pending_tasks": statuses.count(TaskStatus.PENDING),
        "in_progress_tasks": statuses.count(TaskStatus.IN_PROGRESS),
        "overdue_tasks": statuses.count(TaskStatus.OVERDUE),
        "completion_rate": completed / total * 100 if total else 0.0,
    }
