"""
API tests for the permit application lifecycle:
submission -> initial assessment -> technical assessment -> decision.
"""

import re
import uuid

from app.models.enums import UserType

from conftest import (
    application_in_initial_review,
    application_pending_decision,
    application_in_technical_review,
    create_draft,
    create_profile,
    submitted_application,
)


class TestDrafts:
    """Creating, editing and submitting applications."""

    async def test_create_draft_with_entity(self, client, login, applicant):
        login(applicant)
        entity = await client.post(
            "/v1/entities",
            json={"name": "Kila Fisheries Ltd", "entity_type": "company", "email": "info@kila.example.org"},
        )
        assert entity.status_code == 201, entity.text

        draft = await create_draft(client, entity_id=entity.json()["id"])
        assert draft["status"] == "draft"
        assert draft["entity_name"] == "Kila Fisheries Ltd"
        assert draft["application_number"] is None

    async def test_entity_of_someone_else_is_rejected(
        self, client, login, applicant, other_applicant
    ):
        login(other_applicant)
        entity = (await client.post(
            "/v1/entities", json={"name": "Other Co", "entity_type": "company"}
        )).json()

        login(applicant)
        response = await client.post(
            "/v1/applications", json={"title": "Borrowed entity", "entity_id": entity["id"]}
        )
        assert response.status_code == 404

    async def test_submit_assigns_number_and_notifies_registry(
        self, client, login, applicant, registry_manager
    ):
        application = await submitted_application(client, login, applicant)
        assert application["status"] == "submitted"
        assert re.fullmatch(r"PA-\d{4}-[0-9A-F]{6}", application["application_number"])
        assert application["application_date"] is not None

        login(registry_manager)
        notices = (await client.get("/v1/notifications/unit")).json()
        assert len(notices) == 1
        assert notices[0]["type"] == "application_submitted"
        assert notices[0]["related_id"] == application["id"]

        queue = (await client.get("/v1/initial-assessments", params={"status": "pending"})).json()
        assert [row["application"]["id"] for row in queue] == [application["id"]]
        assert queue[0]["assessor"] is None

    async def test_submitted_application_is_locked(self, client, login, applicant):
        application = await submitted_application(client, login, applicant)
        response = await client.patch(
            f"/v1/applications/{application['id']}", json={"title": "Changed title"}
        )
        assert response.status_code == 409

    async def test_submitting_twice_conflicts(self, client, login, applicant):
        application = await submitted_application(client, login, applicant)
        response = await client.post(f"/v1/applications/{application['id']}/submit")
        assert response.status_code == 409

    async def test_only_the_applicant_can_submit(self, client, login, db, applicant, other_applicant):
        login(applicant)
        draft = await create_draft(client)

        login(other_applicant)
        response = await client.post(f"/v1/applications/{draft['id']}/submit")
        assert response.status_code == 404

        admin = await create_profile(db, first_name="Sue", user_type=UserType.SUPER_ADMIN)
        login(admin)
        response = await client.post(f"/v1/applications/{draft['id']}/submit")
        assert response.status_code == 200


class TestVisibility:
    """Who sees which applications."""

    async def test_drafts_are_private(self, client, login, applicant, other_applicant, registry_manager):
        login(applicant)
        draft = await create_draft(client)

        login(other_applicant)
        assert (await client.get(f"/v1/applications/{draft['id']}")).status_code == 404
        assert (await client.get("/v1/applications")).json() == []

        login(registry_manager)
        assert (await client.get(f"/v1/applications/{draft['id']}")).status_code == 404

    async def test_registry_officer_sees_only_assigned(
        self, client, login, applicant, registry_manager, registry_officer
    ):
        assigned = await application_in_initial_review(
            client, login, applicant, registry_manager, registry_officer, title="Assigned one"
        )
        await submitted_application(client, login, applicant, title="Unassigned one")

        login(registry_officer)
        listed = (await client.get("/v1/applications")).json()
        assert [a["id"] for a in listed] == [assigned["id"]]

        login(registry_manager)
        assert len((await client.get("/v1/applications")).json()) == 2

    async def test_search(self, client, login, applicant, registry_manager):
        await submitted_application(client, login, applicant, title="Gold mine expansion")
        await submitted_application(client, login, applicant, title="Palm oil mill")

        login(registry_manager)
        found = (await client.get("/v1/applications", params={"search": "MINE"})).json()
        assert [a["title"] for a in found] == ["Gold mine expansion"]

    async def test_search_wildcards_are_literal(self, client, login, applicant, registry_manager):
        await submitted_application(client, login, applicant, title="Cannery expansion")
        await submitted_application(client, login, applicant, title="Sawmill")
        await submitted_application(client, login, applicant, title="Kiln 50% upgrade")

        login(registry_manager)
        for term in ("_", "Saw_ill", "%mill"):
            found = (await client.get("/v1/applications", params={"search": term})).json()
            assert found == [], term

        found = (await client.get("/v1/applications", params={"search": "50%"})).json()
        assert [a["title"] for a in found] == ["Kiln 50% upgrade"]

        # The assessment lists share the same search
        found = (await client.get("/v1/initial-assessments", params={"search": "%"})).json()
        assert [a["application"]["title"] for a in found] == ["Kiln 50% upgrade"]
        found = (await client.get("/v1/initial-assessments", params={"search": "_"})).json()
        assert found == []


class TestRegistryStage:
    """Officer assignment and initial assessment."""

    async def test_assignment_starts_initial_review(
        self, client, login, applicant, registry_manager, registry_officer
    ):
        application = await application_in_initial_review(
            client, login, applicant, registry_manager, registry_officer
        )
        assert application["status"] == "under_initial_review"
        assert application["assigned_officer_id"] == str(registry_officer.id)

        login(registry_officer)
        queue = (await client.get("/v1/initial-assessments")).json()
        assert len(queue) == 1
        assert queue[0]["assessor"]["full_name"] == "Reg Officer"

    async def test_officer_cannot_assign(self, client, login, applicant, registry_officer):
        application = await submitted_application(client, login, applicant)
        login(registry_officer)
        response = await client.post(
            f"/v1/applications/{application['id']}/assign-officer",
            json={"officer_id": str(registry_officer.id)},
        )
        assert response.status_code == 403

    async def test_assign_to_unknown_officer(self, client, login, applicant, registry_manager):
        application = await submitted_application(client, login, applicant)
        login(registry_manager)
        response = await client.post(
            f"/v1/applications/{application['id']}/assign-officer",
            json={"officer_id": str(uuid.uuid4())},
        )
        assert response.status_code == 404

    async def test_pending_status_is_not_a_decision(
        self, client, login, applicant, registry_manager, registry_officer
    ):
        application = await application_in_initial_review(
            client, login, applicant, registry_manager, registry_officer
        )
        login(registry_officer)
        response = await client.post(
            f"/v1/applications/{application['id']}/initial-assessment",
            json={"assessment_status": "pending", "assessment_outcome": "x", "assessment_notes": "y"},
        )
        assert response.status_code == 422

    async def test_unassigned_officer_cannot_assess(
        self, client, login, db, applicant, registry_manager, registry_officer
    ):
        application = await application_in_initial_review(
            client, login, applicant, registry_manager, registry_officer
        )
        other = await create_profile(
            db,
            first_name="Second",
            user_type=registry_officer.user_type,
            staff_unit=registry_officer.staff_unit,
            staff_position=registry_officer.staff_position,
        )
        login(other)
        response = await client.post(
            f"/v1/applications/{application['id']}/initial-assessment",
            json={"assessment_status": "failed", "assessment_outcome": "x", "assessment_notes": "y"},
        )
        # Unassigned officers cannot even see the application
        assert response.status_code == 404

    async def test_failed_assessment_rejects(
        self, client, login, applicant, registry_manager, registry_officer
    ):
        application = await application_in_initial_review(
            client, login, applicant, registry_manager, registry_officer
        )
        login(registry_officer)
        response = await client.post(
            f"/v1/applications/{application['id']}/initial-assessment",
            json={
                "assessment_status": "failed",
                "assessment_outcome": "Not a prescribed activity",
                "assessment_notes": "Outside scope",
                "feedback_provided": "Apply for a different permit type",
            },
        )
        assert response.status_code == 201, response.text

        login(applicant)
        current = (await client.get(f"/v1/applications/{application['id']}")).json()
        assert current["status"] == "rejected"
        notices = (await client.get("/v1/notifications")).json()
        assert notices[0]["title"] == "Initial Assessment Failed"
        assert notices[0]["message"].endswith("Apply for a different permit type")

    async def test_pass_with_other_outcome_stays_in_initial_review(
        self, client, login, applicant, registry_manager, registry_officer
    ):
        application = await application_in_initial_review(
            client, login, applicant, registry_manager, registry_officer
        )
        login(registry_officer)
        await client.post(
            f"/v1/applications/{application['id']}/initial-assessment",
            json={
                "assessment_status": "passed",
                "assessment_outcome": "Passed pending fee",
                "assessment_notes": "Waiting on fee",
            },
        )
        current = (await client.get(f"/v1/applications/{application['id']}")).json()
        assert current["status"] == "under_initial_review"

    async def test_clarification_loop_resets_assessment(
        self, client, login, applicant, registry_manager, registry_officer
    ):
        application = await application_in_initial_review(
            client, login, applicant, registry_manager, registry_officer
        )
        login(registry_officer)
        await client.post(
            f"/v1/applications/{application['id']}/initial-assessment",
            json={
                "assessment_status": "requires_clarification",
                "assessment_outcome": "Missing site map",
                "assessment_notes": "Please attach a site map",
            },
        )

        login(applicant)
        response = await client.patch(
            f"/v1/applications/{application['id']}",
            json={"activity_location": "Portion 12, Lae"},
        )
        assert response.status_code == 200, response.text

        response = await client.post(f"/v1/applications/{application['id']}/submit")
        assert response.status_code == 200, response.text
        resubmitted = response.json()
        assert resubmitted["status"] == "submitted"
        assert resubmitted["application_number"] == application["application_number"]

        login(registry_manager)
        queue = (await client.get("/v1/initial-assessments", params={"status": "pending"})).json()
        assert [row["application"]["id"] for row in queue] == [application["id"]]

    async def test_amending_assessment_text_is_audited(
        self, client, login, applicant, registry_manager, registry_officer
    ):
        application = await application_in_technical_review(
            client, login, applicant, registry_manager, registry_officer
        )
        login(registry_officer)
        assessment = (await client.get("/v1/initial-assessments")).json()[0]

        response = await client.patch(
            f"/v1/initial-assessments/{assessment['id']}",
            json={"assessment_notes": "All documents present and verified"},
        )
        assert response.status_code == 200, response.text
        assert response.json()["assessment_status"] == "passed"

        login(registry_manager)
        trail = (await client.get(f"/v1/applications/{application['id']}/audit-trail")).json()
        assert trail[0]["action_type"] == "assessment_updated"
        assert trail[0]["changes_made"] == {
            "assessment_notes": {
                "from": "All documents present",
                "to": "All documents present and verified",
            }
        }


class TestBulkAssignment:

    async def test_partial_failure(self, client, login, applicant, registry_manager, registry_officer):
        first = await submitted_application(client, login, applicant, title="First")
        second = await submitted_application(client, login, applicant, title="Second")
        login(applicant)
        draft = await create_draft(client, title="Still a draft")
        missing = str(uuid.uuid4())

        login(registry_manager)
        response = await client.post(
            "/v1/applications/bulk-assign",
            json={
                "ids": [first["id"], second["id"], draft["id"], missing, first["id"]],
                "officer_id": str(registry_officer.id),
            },
        )
        assert response.status_code == 200, response.text
        result = response.json()
        assert result["assigned_count"] == 2
        assert result["total"] == 4
        assert result["message"] == "2 of 4 assigned"
        assert set(result["assigned"]) == {first["id"], second["id"]}
        reasons = {f["id"]: f["reason"] for f in result["failed"]}
        assert reasons[missing] == "Application not found"
        assert "draft" in reasons[draft["id"]]

        for app_id in (first["id"], second["id"]):
            current = (await client.get(f"/v1/applications/{app_id}")).json()
            assert current["status"] == "under_initial_review"

    async def test_officer_must_be_registry_staff(
        self, client, login, applicant, registry_manager, compliance_officer
    ):
        application = await submitted_application(client, login, applicant)
        login(registry_manager)
        response = await client.post(
            "/v1/applications/bulk-assign",
            json={"ids": [application["id"]], "officer_id": str(compliance_officer.id)},
        )
        assert response.status_code == 400


class TestFullLifecycle:

    async def test_submission_to_approval(
        self,
        client,
        login,
        applicant,
        registry_manager,
        registry_officer,
        compliance_manager,
        compliance_officer,
        director,
    ):
        application = await application_in_technical_review(
            client, login, applicant, registry_manager, registry_officer
        )
        app_id = application["id"]

        # Compliance manager picks up the new technical assessment
        login(compliance_manager)
        notices = (await client.get("/v1/notifications/unit")).json()
        assert [n["type"] for n in notices] == ["initial_assessment_passed"]

        pending = (await client.get("/v1/compliance-assessments", params={"status": "pending"})).json()
        assert len(pending) == 1
        assert pending[0]["status_badge"] == {"label": "Pending Assignment", "variant": "info"}
        compliance_id = pending[0]["id"]

        response = await client.post(
            f"/v1/compliance-assessments/{compliance_id}/assign",
            json={"officer_id": str(compliance_officer.id)},
        )
        assert response.status_code == 200, response.text
        assigned = response.json()
        assert assigned["assessment_status"] == "in_progress"
        assert assigned["assessment_notes"] == "Assigned for technical assessment"

        # Officer completes the technical review
        login(compliance_officer)
        detail = (await client.get(f"/v1/compliance-assessments/{compliance_id}")).json()
        assert detail["initial_assessment"]["assessment_status"] == "passed"
        assert detail["application"]["id"] == app_id

        response = await client.patch(
            f"/v1/compliance-assessments/{compliance_id}",
            json={
                "assessment_status": "passed",
                "compliance_score": 85,
                "recommendations": "Quarterly effluent monitoring",
                "violations_found": [],
            },
        )
        assert response.status_code == 200, response.text
        assert response.json()["status_badge"]["variant"] == "success"

        current = (await client.get(f"/v1/applications/{app_id}")).json()
        assert current["status"] == "pending_decision"

        # Officers cannot take the final decision
        response = await client.post(
            f"/v1/applications/{app_id}/transition", json={"to_status": "approved"}
        )
        assert response.status_code == 403

        login(director)
        notices = (await client.get("/v1/notifications/unit")).json()
        assert [n["type"] for n in notices] == ["compliance_assessment_completed"]
        assert notices[0]["metadata"] == {"compliance_score": 85}

        response = await client.post(
            f"/v1/applications/{app_id}/transition",
            json={"to_status": "approved", "permit_number": "EP-L2-0042"},
        )
        assert response.status_code == 200, response.text
        decided = response.json()
        assert decided["status"] == "approved"
        assert decided["permit_number"] == "EP-L2-0042"
        assert decided["approval_date"] is not None

        # Closed applications cannot move again
        response = await client.post(
            f"/v1/applications/{app_id}/transition", json={"to_status": "rejected"}
        )
        assert response.status_code == 409

        login(applicant)
        titles = [n["title"] for n in (await client.get("/v1/notifications")).json()]
        assert "Application Approved" in titles
        assert "Initial Assessment Completed" in titles

        login(registry_manager)
        trail = (await client.get(f"/v1/applications/{app_id}/audit-trail")).json()
        assert trail[0]["action_type"] == "status_changed"
        assert trail[0]["new_status"] == "approved"
        assert trail[0]["officer_name"] == "Dee Director"
        statuses = [e["new_status"] for e in trail if e["action_type"] == "status_changed"]
        assert statuses == [
            "approved",
            "pending_decision",
            "under_technical_review",
            "under_initial_review",
            "submitted",
        ]

        response = await client.get(f"/v1/applications/{app_id}/report.pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    async def test_clarification_from_technical_review(
        self, client, login, applicant, registry_manager, registry_officer, compliance_manager, compliance_officer
    ):
        application = await application_in_technical_review(
            client, login, applicant, registry_manager, registry_officer
        )
        login(compliance_manager)
        response = await client.post(
            f"/v1/applications/{application['id']}/assign-compliance-officer",
            json={"officer_id": str(compliance_officer.id), "assessment_notes": "Site visit needed"},
        )
        assert response.status_code == 200, response.text
        compliance_id = response.json()["id"]

        login(compliance_officer)
        await client.patch(
            f"/v1/compliance-assessments/{compliance_id}",
            json={"assessment_status": "requires_clarification", "recommendations": "Provide drainage plan"},
        )

        login(applicant)
        current = (await client.get(f"/v1/applications/{application['id']}")).json()
        assert current["status"] == "requires_clarification"
        notices = (await client.get("/v1/notifications")).json()
        assert notices[0]["title"] == "Clarification Required"
        assert "Provide drainage plan" in notices[0]["message"]

    async def test_scores_are_bounded(
        self, client, login, applicant, registry_manager, registry_officer, compliance_manager
    ):
        await application_in_technical_review(
            client, login, applicant, registry_manager, registry_officer
        )
        login(compliance_manager)
        compliance_id = (await client.get("/v1/compliance-assessments")).json()[0]["id"]
        response = await client.patch(
            f"/v1/compliance-assessments/{compliance_id}", json={"compliance_score": 120}
        )
        assert response.status_code == 422


class TestDashboards:

    async def test_registry_and_compliance_counts(
        self, client, login, applicant, registry_manager, registry_officer, compliance_manager
    ):
        await application_in_technical_review(
            client, login, applicant, registry_manager, registry_officer
        )
        await submitted_application(client, login, applicant, title="Waiting")

        login(registry_manager)
        stats = (await client.get("/v1/dashboard/registry")).json()
        assert stats["applications_by_status"]["submitted"] == 1
        assert stats["applications_by_status"]["under_technical_review"] == 1
        assert "draft" not in stats["applications_by_status"]
        assert stats["initial_assessments_by_status"]["passed"] == 1
        assert stats["initial_assessments_by_status"]["pending"] == 1
        assert stats["unassigned_submissions"] == 1

        login(compliance_manager)
        stats = (await client.get("/v1/dashboard/compliance")).json()
        assert stats["compliance_assessments_by_status"]["pending"] == 1
        assert stats["unassigned_assessments"] == 1
        assert stats["average_compliance_score"] == 0.0

        response = await client.get("/v1/dashboard/registry")
        assert response.status_code == 403


class TestTransitionEndpoint:
    """POST /v1/applications/{id}/transition only covers moves without assessment work."""

    async def test_initial_review_cannot_be_skipped(
        self, client, login, applicant, registry_manager, registry_officer, compliance_manager
    ):
        application = await application_in_initial_review(
            client, login, applicant, registry_manager, registry_officer
        )
        app_id = application["id"]

        for user, target in (
            (registry_officer, "under_technical_review"),
            (registry_manager, "rejected"),
            (registry_officer, "requires_clarification"),
        ):
            login(user)
            response = await client.post(
                f"/v1/applications/{app_id}/transition", json={"to_status": target}
            )
            assert response.status_code == 409, target
            assert "recording the assessment" in response.json()["detail"]

        current = (await client.get(f"/v1/applications/{app_id}")).json()
        assert current["status"] == "under_initial_review"

        login(compliance_manager)
        assert (await client.get("/v1/compliance-assessments")).json() == []

    async def test_technical_review_cannot_be_skipped(
        self, client, login, applicant, registry_manager, registry_officer, compliance_manager
    ):
        application = await application_in_technical_review(
            client, login, applicant, registry_manager, registry_officer
        )
        login(compliance_manager)
        response = await client.post(
            f"/v1/applications/{application['id']}/transition",
            json={"to_status": "pending_decision"},
        )
        assert response.status_code == 409

        pending = (await client.get("/v1/compliance-assessments")).json()
        assert [c["assessment_status"] for c in pending] == ["pending"]

    async def test_review_starts_by_assignment(self, client, login, applicant, registry_manager):
        application = await submitted_application(client, login, applicant)
        login(registry_manager)
        response = await client.post(
            f"/v1/applications/{application['id']}/transition",
            json={"to_status": "under_initial_review"},
        )
        assert response.status_code == 409
        assert "assigning a registry officer" in response.json()["detail"]

    async def test_applicant_cancels_submitted_application(self, client, login, applicant):
        application = await submitted_application(client, login, applicant)
        response = await client.post(
            f"/v1/applications/{application['id']}/transition",
            json={"to_status": "cancelled"},
        )
        assert response.status_code == 200, response.text
        assert response.json()["status"] == "cancelled"


class TestSendBack:
    """A decision sent back to technical review reopens the compliance assessment."""

    async def test_send_back_reopens_assessment(
        self,
        client,
        login,
        applicant,
        registry_manager,
        registry_officer,
        compliance_manager,
        compliance_officer,
        director,
    ):
        application, compliance_id = await application_pending_decision(
            client, login, applicant, registry_manager, registry_officer,
            compliance_manager, compliance_officer,
        )
        app_id = application["id"]

        login(director)
        response = await client.post(
            f"/v1/applications/{app_id}/transition",
            json={"to_status": "under_technical_review", "notes": "Check the noise survey"},
        )
        assert response.status_code == 200, response.text
        assert response.json()["status"] == "under_technical_review"

        login(compliance_officer)
        detail = (await client.get(f"/v1/compliance-assessments/{compliance_id}")).json()
        assert detail["assessment_status"] == "in_progress"

        notices = (await client.get("/v1/notifications")).json()
        assert notices[0]["title"] == "Assessment Reopened"
        assert "Check the noise survey" in notices[0]["message"]

        # Passing again moves the application back to the decision stage
        response = await client.patch(
            f"/v1/compliance-assessments/{compliance_id}",
            json={"assessment_status": "passed", "compliance_score": 90},
        )
        assert response.status_code == 200, response.text
        current = (await client.get(f"/v1/applications/{app_id}")).json()
        assert current["status"] == "pending_decision"

        login(registry_manager)
        trail = (await client.get(f"/v1/applications/{app_id}/audit-trail")).json()
        reopened = [e for e in trail if (e["metadata"] or {}).get("reopened")]
        assert len(reopened) == 1
        assert reopened[0]["previous_status"] == "passed"
        assert reopened[0]["new_status"] == "in_progress"

    async def test_concluded_assessment_cannot_be_reopened_directly(
        self, client, login, applicant, registry_manager, registry_officer,
        compliance_manager, compliance_officer,
    ):
        application, compliance_id = await application_pending_decision(
            client, login, applicant, registry_manager, registry_officer,
            compliance_manager, compliance_officer,
        )

        for target in ("in_progress", "pending"):
            response = await client.patch(
                f"/v1/compliance-assessments/{compliance_id}",
                json={"assessment_status": target},
            )
            assert response.status_code == 409, target

        # Non-status fields can still be amended
        response = await client.patch(
            f"/v1/compliance-assessments/{compliance_id}",
            json={"recommendations": "Annual audit"},
        )
        assert response.status_code == 200, response.text
        assert response.json()["assessment_status"] == "passed"

        current = (await client.get(f"/v1/applications/{application['id']}")).json()
        assert current["status"] == "pending_decision"


class TestComplianceAssessments:
    """/v1/compliance-assessments detail and bulk assignment."""

    async def test_detail_includes_initial_assessment(
        self, client, login, applicant, registry_manager, registry_officer,
        compliance_manager, compliance_officer,
    ):
        application = await application_in_technical_review(
            client, login, applicant, registry_manager, registry_officer
        )
        login(compliance_manager)
        compliance_id = (await client.get("/v1/compliance-assessments")).json()[0]["id"]

        detail = (await client.get(f"/v1/compliance-assessments/{compliance_id}")).json()
        assert detail["application"]["id"] == application["id"]
        assert detail["initial_assessment"]["assessment_outcome"] == "Approved for Next Stage"
        assert detail["initial_assessment"]["assessment_notes"] == "All documents present"
        assert detail["status_badge"] == {"label": "Pending Assignment", "variant": "info"}

        # Officers only see assessments assigned to them
        login(compliance_officer)
        response = await client.get(f"/v1/compliance-assessments/{compliance_id}")
        assert response.status_code == 404

    async def test_bulk_assign_reports_each_item(
        self, client, login, applicant, registry_manager, registry_officer,
        compliance_manager, compliance_officer,
    ):
        for _ in range(2):
            await application_in_technical_review(
                client, login, applicant, registry_manager, registry_officer
            )
        login(compliance_manager)
        first, second = [c["id"] for c in (await client.get("/v1/compliance-assessments")).json()]
        missing = str(uuid.uuid4())

        response = await client.post(
            "/v1/compliance-assessments/bulk-assign",
            json={
                "ids": [first, second, first, missing],
                "officer_id": str(compliance_officer.id),
            },
        )
        assert response.status_code == 200, response.text
        result = response.json()
        assert sorted(result["assigned"]) == sorted([first, second])
        assert result["failed"] == [{"id": missing, "reason": "Compliance assessment not found"}]
        assert result["assigned_count"] == 2
        assert result["total"] == 3
        assert result["message"] == "2 of 3 assigned"

        login(compliance_officer)
        mine = (await client.get("/v1/compliance-assessments")).json()
        assert {c["assessment_status"] for c in mine} == {"in_progress"}
        assert len(mine) == 2

    async def test_bulk_assign_needs_compliance_manager(
        self, client, login, applicant, registry_manager, registry_officer, compliance_officer
    ):
        await application_in_technical_review(
            client, login, applicant, registry_manager, registry_officer
        )
        login(compliance_officer)
        response = await client.post(
            "/v1/compliance-assessments/bulk-assign",
            json={"ids": [str(uuid.uuid4())], "officer_id": str(compliance_officer.id)},
        )
        assert response.status_code == 403
