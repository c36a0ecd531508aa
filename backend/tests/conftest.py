"""
Shared fixtures for the EcoPermit Administration test suite.

Uses pytest, pytest-asyncio and httpx.AsyncClient against an in-memory
SQLite database (aiosqlite). Authentication is replaced by a dependency
override that resolves the profile chosen with ``login``.
"""

import os

# Configuration must exist before the app modules are imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("FIREBASE_PROJECT_ID", "ecopermit-test")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:5173")

import uuid
from typing import Any, Optional

import pytest
from fastapi import Depends
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import get_current_user, load_current_user
from app.main import app
from app.models.enums import UserType, StaffUnit, StaffPosition
from app.models.fee import PrescribedActivity, FeeStructure
from app.models.profile import Profile


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    """Session for arranging data and checking results."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def auth_state() -> dict[str, Optional[str]]:
    return {"uid": None}


@pytest.fixture
def login(auth_state):
    """Act as the given profile for subsequent requests."""

    def _login(profile: Profile) -> None:
        auth_state["uid"] = profile.firebase_uid

    return _login


@pytest.fixture
async def client(session_factory, auth_state):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_current_user(session: AsyncSession = Depends(get_db)):
        return await load_current_user(session, {"uid": auth_state["uid"]})

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

async def create_profile(db: AsyncSession, **fields: Any) -> Profile:
    suffix = uuid.uuid4().hex[:8]
    profile = Profile(
        firebase_uid=fields.pop("firebase_uid", f"uid-{suffix}"),
        email=fields.pop("email", f"user-{suffix}@example.org"),
        **fields,
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


@pytest.fixture
async def applicant(db):
    return await create_profile(
        db, first_name="Ana", last_name="Kila", user_type=UserType.PUBLIC
    )


@pytest.fixture
async def other_applicant(db):
    return await create_profile(db, first_name="Ben", user_type=UserType.PUBLIC)


@pytest.fixture
async def registry_manager(db):
    # Registry management requires an admin account
    return await create_profile(
        db,
        first_name="Rita",
        last_name="Manager",
        user_type=UserType.ADMIN,
        staff_unit=StaffUnit.REGISTRY,
        staff_position=StaffPosition.MANAGER,
    )


@pytest.fixture
async def registry_officer(db):
    return await create_profile(
        db,
        first_name="Reg",
        last_name="Officer",
        user_type=UserType.STAFF,
        staff_unit=StaffUnit.REGISTRY,
        staff_position=StaffPosition.OFFICER,
    )


@pytest.fixture
async def compliance_manager(db):
    return await create_profile(
        db,
        first_name="Cora",
        last_name="Manager",
        user_type=UserType.STAFF,
        staff_unit=StaffUnit.COMPLIANCE,
        staff_position=StaffPosition.MANAGER,
    )


@pytest.fixture
async def compliance_officer(db):
    return await create_profile(
        db,
        first_name="Cal",
        last_name="Officer",
        user_type=UserType.STAFF,
        staff_unit=StaffUnit.COMPLIANCE,
        staff_position=StaffPosition.OFFICER,
    )


@pytest.fixture
async def director(db):
    return await create_profile(
        db,
        first_name="Dee",
        last_name="Director",
        user_type=UserType.STAFF,
        staff_unit=StaffUnit.DIRECTORATE,
        staff_position=StaffPosition.DIRECTOR,
    )


# ---------------------------------------------------------------------------
# Fee schedule
# ---------------------------------------------------------------------------

@pytest.fixture
async def level2_activity(db):
    activity = PrescribedActivity(
        category_number="12.3",
        category_type="Manufacturing",
        sub_category="food processing",
        activity_description="Processing of agricultural produce",
        level=2,
        fee_category="2.1",
    )
    structure = FeeStructure(
        activity_type="Level 2",
        permit_operation="new",
        fee_category="2.1",
        annual_recurrent_fee_cents=3_650_000,
        base_processing_days=30,
        work_plan_amount_cents=1_550_000,
    )
    db.add_all([activity, structure])
    await db.commit()
    await db.refresh(activity)
    return activity


# ---------------------------------------------------------------------------
# Workflow helpers
# ---------------------------------------------------------------------------

async def create_draft(client: AsyncClient, title: str = "Cannery expansion", **fields: Any) -> dict:
    response = await client.post("/v1/applications", json={"title": title, **fields})
    assert response.status_code == 201, response.text
    return response.json()


async def submitted_application(client, login, applicant, title: str = "Cannery expansion") -> dict:
    login(applicant)
    draft = await create_draft(client, title)
    response = await client.post(f"/v1/applications/{draft['id']}/submit")
    assert response.status_code == 200, response.text
    return response.json()


async def application_in_initial_review(
    client, login, applicant, registry_manager, registry_officer, title: str = "Cannery expansion"
) -> dict:
    application = await submitted_application(client, login, applicant, title)
    login(registry_manager)
    response = await client.post(
        f"/v1/applications/{application['id']}/assign-officer",
        json={"officer_id": str(registry_officer.id)},
    )
    assert response.status_code == 200, response.text
    return response.json()


async def application_in_technical_review(
    client, login, applicant, registry_manager, registry_officer
) -> dict:
    application = await application_in_initial_review(
        client, login, applicant, registry_manager, registry_officer
    )
    login(registry_officer)
    response = await client.post(
        f"/v1/applications/{application['id']}/initial-assessment",
        json={
            "assessment_status": "passed",
            "assessment_outcome": "Approved for Next Stage",
            "assessment_notes": "All documents present",
        },
    )
    assert response.status_code == 201, response.text
    return application


async def application_pending_decision(
    client, login, applicant, registry_manager, registry_officer, compliance_manager, compliance_officer
) -> tuple[dict, str]:
    """Application whose technical assessment passed; returns it with the compliance id."""
    application = await application_in_technical_review(
        client, login, applicant, registry_manager, registry_officer
    )
    login(compliance_manager)
    response = await client.post(
        f"/v1/applications/{application['id']}/assign-compliance-officer",
        json={"officer_id": str(compliance_officer.id)},
    )
    assert response.status_code == 200, response.text
    compliance_id = response.json()["id"]

    login(compliance_officer)
    response = await client.patch(
        f"/v1/compliance-assessments/{compliance_id}",
        json={"assessment_status": "passed", "compliance_score": 78},
    )
    assert response.status_code == 200, response.text
    return application, compliance_id
