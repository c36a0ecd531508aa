"""Role, unit and position access rules for staff dashboards."""

from dataclasses import dataclass
from typing import Optional

from app.models.enums import UserType, StaffUnit, StaffPosition, MANAGER_POSITIONS


@dataclass(frozen=True)
class RouteAccessConfig:
    """Allowed values per attribute. None means the attribute is not checked."""

    allowed_roles: Optional[tuple[UserType, ...]] = None
    allowed_units: Optional[tuple[StaffUnit, ...]] = None
    allowed_positions: Optional[tuple[StaffPosition, ...]] = None


def can_access(profile, config: RouteAccessConfig) -> bool:
    """Check a profile against an access config.

    Super admins pass every check. Otherwise each configured list must
    contain the profile's value.
    """
    if profile is None:
        return False

    if profile.user_type == UserType.SUPER_ADMIN:
        return True

    if config.allowed_roles is not None and profile.user_type not in config.allowed_roles:
        return False
    if config.allowed_units is not None and profile.staff_unit not in config.allowed_units:
        return False
    if config.allowed_positions is not None and profile.staff_position not in config.allowed_positions:
        return False

    return True


def _officer(unit: StaffUnit) -> RouteAccessConfig:
    return RouteAccessConfig(
        allowed_roles=(UserType.STAFF, UserType.ADMIN),
        allowed_units=(unit,),
        allowed_positions=(StaffPosition.OFFICER,),
    )


def _manager(unit: StaffUnit, roles: tuple[UserType, ...]) -> RouteAccessConfig:
    return RouteAccessConfig(
        allowed_roles=roles,
        allowed_units=(unit,),
        allowed_positions=MANAGER_POSITIONS,
    )


PERMISSIONS: dict[StaffUnit, dict[str, RouteAccessConfig]] = {
    StaffUnit.REGISTRY: {
        "officer": _officer(StaffUnit.REGISTRY),
        "manager": _manager(StaffUnit.REGISTRY, (UserType.ADMIN, UserType.SUPER_ADMIN)),
    },
    StaffUnit.COMPLIANCE: {
        "officer": _officer(StaffUnit.COMPLIANCE),
        "manager": _manager(
            StaffUnit.COMPLIANCE, (UserType.STAFF, UserType.ADMIN, UserType.SUPER_ADMIN)
        ),
    },
    StaffUnit.REVENUE: {
        "officer": _officer(StaffUnit.REVENUE),
        "manager": _manager(
            StaffUnit.REVENUE, (UserType.STAFF, UserType.ADMIN, UserType.SUPER_ADMIN)
        ),
    },
    StaffUnit.FINANCE: {
        "officer": _officer(StaffUnit.FINANCE),
        "manager": _manager(
            StaffUnit.FINANCE, (UserType.STAFF, UserType.ADMIN, UserType.SUPER_ADMIN)
        ),
    },
    StaffUnit.DIRECTORATE: {
        "staff": RouteAccessConfig(
            allowed_roles=(UserType.STAFF, UserType.ADMIN, UserType.SUPER_ADMIN),
            allowed_units=(StaffUnit.DIRECTORATE,),
            allowed_positions=(StaffPosition.OFFICER,) + MANAGER_POSITIONS,
        ),
    },
}


def is_unit_manager(profile, unit: StaffUnit) -> bool:
    """True when the profile passes the unit's manager config."""
    config = PERMISSIONS.get(unit, {}).get("manager")
    return config is not None and can_access(profile, config)


def is_unit_staff(profile, unit: StaffUnit) -> bool:
    """True when the profile passes any of the unit's configs."""
    return any(can_access(profile, config) for config in PERMISSIONS.get(unit, {}).values())
