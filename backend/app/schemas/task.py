"""Unit task schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.schemas.base import BaseSchema, IDMixin, TimestampMixin
from app.models.enums import TaskStatus, TaskPriority


class TaskCreate(BaseSchema):
    """Create a unit task."""

    task_type: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_to: UUID
    priority: TaskPriority = TaskPriority.NORMAL
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    related_permit_id: Optional[UUID] = None
    related_inspection_id: Optional[UUID] = None
    related_intent_id: Optional[UUID] = None


class TaskUpdate(BaseSchema):
    """Update a unit task."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_to: Optional[UUID] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    progress_percentage: Optional[int] = Field(None, ge=0, le=100)


class TaskResponse(BaseSchema, IDMixin, TimestampMixin):
    """Unit task with its assignee."""

    task_type: str
    title: str
    description: Optional[str] = None
    assigned_to: UUID
    assigned_by: Optional[UUID] = None
    assignee_name: Optional[str] = None
    assignee_email: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None
    progress_percentage: int = 0
    related_permit_id: Optional[UUID] = None
    related_inspection_id: Optional[UUID] = None
    related_intent_id: Optional[UUID] = None


class StaffTaskMetrics(BaseSchema):
    """Task performance of one staff member."""

    staff_id: UUID
    staff_name: str
    staff_email: Optional[str] = None
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    in_progress_tasks: int
    overdue_tasks: int
    completion_rate: float
    average_completion_days: float
    on_time_rate: float


class TaskMetricsResponse(BaseSchema):
    """Per-staff task metrics with unit totals."""

    staff: list[StaffTaskMetrics]
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    in_progress_tasks: int
    overdue_tasks: int
    completion_rate: float
