"""Unit tasks router (registry, compliance and revenue)."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import CurrentUser, get_current_user
from app.models.enums import NotificationType, StaffUnit, TaskStatus
from app.models.profile import Profile
from app.schemas.task import TaskCreate, TaskUpdate, TaskResponse, TaskMetricsResponse
from app.services.notifications import NotificationService
from app.services.staff import list_unit_staff
from app.services.tasks import (
    TaskValidationError,
    UnknownUnitError,
    apply_task_changes,
    compute_task_metrics,
    effective_status,
    task_model,
    validate_task_type,
)

router = APIRouter(prefix="/units/{unit}/tasks", tags=["tasks"])


def _resolve_unit(unit: StaffUnit, current_user: CurrentUser):
    """Task model for the unit, after checking the caller belongs to it."""
    try:
        model = task_model(unit)
    except UnknownUnitError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if not current_user.is_staff_of(unit):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{unit.value.capitalize()} staff access required",
        )
    return model


def _require_manager(unit: StaffUnit, current_user: CurrentUser) -> None:
    if not current_user.is_manager_of(unit):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{unit.value.capitalize()} manager privileges required",
        )


def _task_response(task, assignee: Optional[Profile], now: datetime) -> TaskResponse:
    response = TaskResponse.model_validate(task)
    response.status = effective_status(task, now)
    if assignee:
        response.assignee_name = assignee.full_name
        response.assignee_email = assignee.email
    return response


async def _assignee_in_unit(db: AsyncSession, unit: StaffUnit, profile_id: UUID) -> Profile:
    assignee = await db.get(Profile, profile_id)
    if not assignee or not assignee.is_active or assignee.staff_unit != unit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Assignee is not an active member of the {unit.value} unit",
        )
    return assignee


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    unit: StaffUnit,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """List the unit's tasks, newest first. Officers only see their own."""
    model = _resolve_unit(unit, current_user)

    query = select(model, Profile).outerjoin(Profile, model.assigned_to == Profile.id)
    if not current_user.is_manager_of(unit):
        query = query.where(model.assigned_to == current_user.id)
    query = query.order_by(model.created_at.desc())

    result = await db.execute(query)
    now = datetime.utcnow()
    return [_task_response(task, assignee, now) for task, assignee in result.all()]


@router.get("/metrics", response_model=TaskMetricsResponse)
async def get_task_metrics(
    unit: StaffUnit,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Per-staff task performance for the unit (managers)."""
    model = _resolve_unit(unit, current_user)
    _require_manager(unit, current_user)

    staff = await list_unit_staff(db, unit)
    result = await db.execute(select(model))
    return TaskMetricsResponse(**compute_task_metrics(result.scalars().all(), staff))


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    unit: StaffUnit,
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create a task and notify the assignee."""
    model = _resolve_unit(unit, current_user)
    _require_manager(unit, current_user)

    try:
        validate_task_type(unit, data.task_type)
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    assignee = await _assignee_in_unit(db, unit, data.assigned_to)

    fields = data.model_dump()
    related = {
        key: fields.pop(key)
        for key in ("related_permit_id", "related_inspection_id", "related_intent_id")
    }
    if unit == StaffUnit.COMPLIANCE:
        fields.update(related)

    task = model(**fields, assigned_by=current_user.id)
    db.add(task)
    await db.flush()

    await NotificationService(db).notify_user(
        assignee.id,
        "New Task Assigned",
        f'You have been assigned "{task.title}".',
        NotificationType.TASK_ASSIGNED,
        related_permit_id=related["related_permit_id"] if unit == StaffUnit.COMPLIANCE else None,
    )
    await db.commit()
    await db.refresh(task)

    return _task_response(task, assignee, datetime.utcnow())


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    unit: StaffUnit,
    task_id: UUID,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Update a task (assignee or unit manager)."""
    model = _resolve_unit(unit, current_user)
    task = await db.get(model, task_id)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    is_manager = current_user.is_manager_of(unit)
    if task.assigned_to != current_user.id and not is_manager:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not assigned to this task")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("status") == TaskStatus.OVERDUE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Overdue is derived from the due date and cannot be set",
        )
    if "assigned_to" in changes:
        if not is_manager:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only managers can reassign tasks")
        await _assignee_in_unit(db, unit, changes["assigned_to"])

    apply_task_changes(task, changes)
    await db.commit()
    await db.refresh(task)

    assignee = await db.get(Profile, task.assigned_to)
    return _task_response(task, assignee, datetime.utcnow())


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    unit: StaffUnit,
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Delete a task (managers)."""
    model = _resolve_unit(unit, current_user)
    _require_manager(unit, current_user)

    task = await db.get(model, task_id)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    await db.delete(task)
    await db.commit()
