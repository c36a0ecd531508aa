"""
Tests for unit tasks: derived overdue status, metrics and the task endpoints.
"""

import uuid
from datetime import datetime
from types import SimpleNamespace

import pytest

from app.models.enums import TaskStatus, StaffUnit, StaffPosition, UserType
from app.services.tasks import (
    TaskValidationError,
    UnknownUnitError,
    apply_task_changes,
    compute_task_metrics,
    effective_status,
    task_model,
    validate_task_type,
)

from conftest import create_profile

NOW = datetime(2026, 5, 10, 12, 0)


def task(assigned_to, status, created, due=None, completed=None):
    return SimpleNamespace(
        assigned_to=assigned_to,
        status=status,
        created_at=created,
        due_date=due,
        completed_at=completed,
        progress_percentage=0,
    )


def staff(name):
    return SimpleNamespace(id=uuid.uuid4(), full_name=name, email=f"{name.lower()}@example.org")


class TestTaskHelpers:

    def test_past_due_open_task_reads_overdue(self):
        t = task(None, TaskStatus.IN_PROGRESS, NOW, due=datetime(2026, 5, 1))
        assert effective_status(t, NOW) == TaskStatus.OVERDUE

    def test_completed_task_is_never_overdue(self):
        t = task(None, TaskStatus.COMPLETED, NOW, due=datetime(2026, 5, 1))
        assert effective_status(t, NOW) == TaskStatus.COMPLETED

    def test_completion_stamps_time_and_progress(self):
        t = task(None, TaskStatus.IN_PROGRESS, NOW)
        apply_task_changes(t, {"status": TaskStatus.COMPLETED}, now=NOW)
        assert t.completed_at == NOW
        assert t.progress_percentage == 100

    def test_reopening_clears_completion(self):
        t = task(None, TaskStatus.COMPLETED, NOW, completed=NOW)
        apply_task_changes(t, {"status": TaskStatus.IN_PROGRESS}, now=NOW)
        assert t.completed_at is None

    def test_task_types_are_per_unit(self):
        validate_task_type(StaffUnit.REGISTRY, "document_review")
        with pytest.raises(TaskValidationError):
            validate_task_type(StaffUnit.REGISTRY, "site_inspection")

    def test_units_without_task_tables(self):
        with pytest.raises(UnknownUnitError):
            task_model(StaffUnit.FINANCE)


class TestTaskMetrics:

    def test_per_staff_metrics(self):
        alice, bob, carol = staff("Alice"), staff("Bob"), staff("Carol")
        tasks = [
            task(alice.id, TaskStatus.COMPLETED, datetime(2026, 5, 1),
                 due=datetime(2026, 5, 5), completed=datetime(2026, 5, 4)),
            task(alice.id, TaskStatus.PENDING, datetime(2026, 4, 20), due=datetime(2026, 5, 1)),
            task(bob.id, TaskStatus.IN_PROGRESS, datetime(2026, 5, 2)),
            task(bob.id, TaskStatus.COMPLETED, datetime(2026, 5, 1),
                 due=datetime(2026, 5, 8), completed=datetime(2026, 5, 9, 12)),
        ]

        metrics = compute_task_metrics(tasks, [carol, alice, bob], now=NOW)

        rows = {row["staff_name"]: row for row in metrics["staff"]}
        assert rows["Alice"]["completed_tasks"] == 1
        assert rows["Alice"]["overdue_tasks"] == 1
        assert rows["Alice"]["average_completion_days"] == 3.0
        assert rows["Alice"]["on_time_rate"] == 100.0
        assert rows["Bob"]["in_progress_tasks"] == 1
        assert rows["Bob"]["average_completion_days"] == 8.0
        assert rows["Bob"]["on_time_rate"] == 0.0

        # Staff without tasks still get a row
        assert rows["Carol"]["total_tasks"] == 0
        assert rows["Carol"]["completion_rate"] == 0.0
        assert rows["Carol"]["on_time_rate"] == 100.0

        assert [r["staff_name"] for r in metrics["staff"]][-1] == "Carol"
        assert metrics["total_tasks"] == 4
        assert metrics["completed_tasks"] == 2
        assert metrics["overdue_tasks"] == 1
        assert metrics["completion_rate"] == 50.0

    def test_no_tasks(self):
        metrics = compute_task_metrics([], [], now=NOW)
        assert metrics["staff"] == []
        assert metrics["completion_rate"] == 0.0


class TestTaskEndpoints:
    """/v1/units/{unit}/tasks"""

    async def _create(self, client, assignee, **fields):
        payload = {
            "task_type": "document_review",
            "title": "Check lodgement documents",
            "assigned_to": str(assignee.id),
            **fields,
        }
        return await client.post("/v1/units/registry/tasks", json=payload)

    async def test_manager_creates_task_and_assignee_is_notified(
        self, client, login, registry_manager, registry_officer
    ):
        login(registry_manager)
        response = await self._create(client, registry_officer, priority="high")
        assert response.status_code == 201, response.text
        body = response.json()
        assert body["status"] == "pending"
        assert body["priority"] == "high"
        assert body["assignee_name"] == "Reg Officer"
        assert body["assigned_by"] == str(registry_manager.id)

        login(registry_officer)
        notifications = (await client.get("/v1/notifications")).json()
        assert [n["title"] for n in notifications] == ["New Task Assigned"]

    async def test_invalid_task_type(self, client, login, registry_manager, registry_officer):
        login(registry_manager)
        response = await self._create(client, registry_officer, task_type="site_inspection")
        assert response.status_code == 400

    async def test_assignee_must_belong_to_unit(
        self, client, login, registry_manager, compliance_officer
    ):
        login(registry_manager)
        response = await self._create(client, compliance_officer)
        assert response.status_code == 400

    async def test_officer_cannot_create(self, client, login, registry_officer):
        login(registry_officer)
        response = await self._create(client, registry_officer)
        assert response.status_code == 403

    async def test_unit_without_tasks(self, client, login, director):
        login(director)
        response = await client.get("/v1/units/finance/tasks")
        assert response.status_code == 404

    async def test_other_unit_is_forbidden(self, client, login, compliance_officer):
        login(compliance_officer)
        response = await client.get("/v1/units/registry/tasks")
        assert response.status_code == 403

    async def test_officer_sees_only_own_tasks_with_overdue_derived(
        self, client, login, db, registry_manager, registry_officer
    ):
        colleague = await create_profile(
            db,
            first_name="Other",
            user_type=UserType.STAFF,
            staff_unit=StaffUnit.REGISTRY,
            staff_position=StaffPosition.OFFICER,
        )
        login(registry_manager)
        await self._create(client, registry_officer, due_date="2020-01-01T00:00:00")
        await self._create(client, colleague, title="Someone else's task")

        login(registry_officer)
        tasks = (await client.get("/v1/units/registry/tasks")).json()
        assert len(tasks) == 1
        assert tasks[0]["status"] == "overdue"

        login(registry_manager)
        assert len((await client.get("/v1/units/registry/tasks")).json()) == 2

    async def test_assignee_completes_task(self, client, login, registry_manager, registry_officer):
        login(registry_manager)
        created = (await self._create(client, registry_officer)).json()

        login(registry_officer)
        response = await client.patch(
            f"/v1/units/registry/tasks/{created['id']}", json={"status": "completed"}
        )
        assert response.status_code == 200, response.text
        body = response.json()
        assert body["status"] == "completed"
        assert body["completed_at"] is not None
        assert body["progress_percentage"] == 100

    async def test_overdue_cannot_be_set(self, client, login, registry_manager, registry_officer):
        login(registry_manager)
        created = (await self._create(client, registry_officer)).json()

        response = await client.patch(
            f"/v1/units/registry/tasks/{created['id']}", json={"status": "overdue"}
        )
        assert response.status_code == 400

    async def test_only_managers_reassign(self, client, login, registry_manager, registry_officer):
        login(registry_manager)
        created = (await self._create(client, registry_officer)).json()

        login(registry_officer)
        response = await client.patch(
            f"/v1/units/registry/tasks/{created['id']}",
            json={"assigned_to": str(registry_manager.id)},
        )
        assert response.status_code == 403

    async def test_metrics_and_delete(self, client, login, registry_manager, registry_officer):
        login(registry_manager)
        created = (await self._create(client, registry_officer)).json()

        response = await client.get("/v1/units/registry/tasks/metrics")
        assert response.status_code == 200, response.text
        metrics = response.json()
        assert metrics["total_tasks"] == 1
        names = {row["staff_name"] for row in metrics["staff"]}
        assert names == {"Rita Manager", "Reg Officer"}

        response = await client.delete(f"/v1/units/registry/tasks/{created['id']}")
        assert response.status_code == 204
        assert (await client.get("/v1/units/registry/tasks")).json() == []

    async def test_officer_cannot_see_metrics(self, client, login, registry_officer):
        login(registry_officer)
        response = await client.get("/v1/units/registry/tasks/metrics")
        assert response.status_code == 403
