"""
Tests for role/unit/position access rules.
"""

import uuid

import pytest
from fastapi import HTTPException

from app.core import security
from app.core.permissions import (
    PERMISSIONS,
    RouteAccessConfig,
    can_access,
    is_unit_manager,
    is_unit_staff,
)
from app.core.security import CurrentUser
from app.models.enums import UserType, StaffUnit, StaffPosition
from app.models.profile import Profile


def make_profile(user_type, unit=None, position=None, **fields) -> Profile:
    return Profile(
        id=uuid.uuid4(),
        firebase_uid=f"uid-{uuid.uuid4().hex[:6]}",
        email="someone@example.org",
        user_type=user_type,
        staff_unit=unit,
        staff_position=position,
        is_active=True,
        **fields,
    )


class TestCanAccess:
    """can_access against explicit configs."""

    def test_none_profile_is_denied(self):
        assert can_access(None, RouteAccessConfig()) is False

    def test_empty_config_allows_anyone(self):
        assert can_access(make_profile(UserType.PUBLIC), RouteAccessConfig()) is True

    def test_super_admin_bypasses_every_list(self):
        config = RouteAccessConfig(
            allowed_roles=(UserType.STAFF,),
            allowed_units=(StaffUnit.REVENUE,),
            allowed_positions=(StaffPosition.OFFICER,),
        )
        assert can_access(make_profile(UserType.SUPER_ADMIN), config) is True

    def test_each_configured_list_must_match(self):
        config = RouteAccessConfig(
            allowed_roles=(UserType.STAFF,),
            allowed_units=(StaffUnit.COMPLIANCE,),
        )
        assert can_access(make_profile(UserType.STAFF, StaffUnit.COMPLIANCE), config) is True
        assert can_access(make_profile(UserType.STAFF, StaffUnit.REGISTRY), config) is False
        assert can_access(make_profile(UserType.ADMIN, StaffUnit.COMPLIANCE), config) is False


class TestUnitRoles:
    """Officer and manager configs per unit."""

    def test_registry_manager_needs_admin_account(self):
        staff_manager = make_profile(UserType.STAFF, StaffUnit.REGISTRY, StaffPosition.MANAGER)
        admin_manager = make_profile(UserType.ADMIN, StaffUnit.REGISTRY, StaffPosition.MANAGER)

        assert is_unit_manager(staff_manager, StaffUnit.REGISTRY) is False
        assert is_unit_manager(admin_manager, StaffUnit.REGISTRY) is True

    def test_compliance_manager_may_be_staff(self):
        manager = make_profile(UserType.STAFF, StaffUnit.COMPLIANCE, StaffPosition.MANAGER)
        assert is_unit_manager(manager, StaffUnit.COMPLIANCE) is True
        assert is_unit_staff(manager, StaffUnit.COMPLIANCE) is True

    @pytest.mark.parametrize("position", [StaffPosition.DIRECTOR, StaffPosition.MANAGING_DIRECTOR])
    def test_senior_positions_count_as_managers(self, position):
        profile = make_profile(UserType.STAFF, StaffUnit.COMPLIANCE, position)
        assert is_unit_manager(profile, StaffUnit.COMPLIANCE) is True

    def test_officer_is_staff_but_not_manager(self):
        officer = make_profile(UserType.STAFF, StaffUnit.REGISTRY, StaffPosition.OFFICER)
        assert is_unit_staff(officer, StaffUnit.REGISTRY) is True
        assert is_unit_manager(officer, StaffUnit.REGISTRY) is False

    def test_other_unit_is_not_staff(self):
        officer = make_profile(UserType.STAFF, StaffUnit.REVENUE, StaffPosition.OFFICER)
        assert is_unit_staff(officer, StaffUnit.REGISTRY) is False

    def test_applicant_is_nobody(self):
        applicant = make_profile(UserType.PUBLIC)
        for unit in PERMISSIONS:
            assert is_unit_staff(applicant, unit) is False

    def test_directorate_has_no_manager_config(self):
        director = make_profile(UserType.STAFF, StaffUnit.DIRECTORATE, StaffPosition.DIRECTOR)
        assert is_unit_staff(director, StaffUnit.DIRECTORATE) is True
        assert is_unit_manager(director, StaffUnit.DIRECTORATE) is False


class TestCurrentUser:
    """Derived flags on the authenticated caller."""

    def test_can_decide(self):
        director = make_profile(UserType.STAFF, StaffUnit.DIRECTORATE, StaffPosition.DIRECTOR)
        compliance_manager = make_profile(UserType.STAFF, StaffUnit.COMPLIANCE, StaffPosition.MANAGER)
        registry_manager = make_profile(UserType.ADMIN, StaffUnit.REGISTRY, StaffPosition.MANAGER)
        officer = make_profile(UserType.STAFF, StaffUnit.DIRECTORATE, StaffPosition.OFFICER)

        assert CurrentUser("a", director).can_decide is True
        assert CurrentUser("b", compliance_manager).can_decide is True
        assert CurrentUser("c", registry_manager).can_decide is False
        assert CurrentUser("d", officer).can_decide is False
        assert CurrentUser("e", make_profile(UserType.SUPER_ADMIN)).can_decide is True

    def test_is_staff(self):
        assert CurrentUser("a", make_profile(UserType.PUBLIC)).is_staff is False
        assert CurrentUser("b", make_profile(UserType.STAFF, StaffUnit.FINANCE)).is_staff is True


class TestDecodeToken:
    """Firebase verification failures map to 401 without leaking details."""

    @pytest.fixture(autouse=True)
    def no_firebase(self, monkeypatch):
        monkeypatch.setattr(security, "init_firebase", lambda: None)

    def test_verification_error_is_not_echoed(self, monkeypatch, caplog):
        def fail(token):
            raise ValueError("project id mismatch for service-account@internal")

        monkeypatch.setattr(security.auth, "verify_id_token", fail)

        with pytest.raises(HTTPException) as exc:
            security.decode_token("token")
        assert exc.value.status_code == 401
        assert exc.value.detail == "Token verification failed"
        assert "internal" not in exc.value.detail
        assert "project id mismatch" in caplog.text

    def test_valid_token_returns_claims(self, monkeypatch):
        monkeypatch.setattr(security.auth, "verify_id_token", lambda token: {"uid": token})
        assert security.decode_token("abc") == {"uid": "abc"}
