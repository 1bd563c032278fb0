"""
Permission codes and role defaults
"""
from typing import Dict, FrozenSet

from hotelpms.models.ontology import EmployeeRole

VIEW_DASHBOARD = "view_dashboard"
MANAGE_RESERVATIONS = "manage_reservations"
MANAGE_ROOMS = "manage_rooms"
MANAGE_GUESTS = "manage_guests"
MANAGE_POS = "manage_pos"
MANAGE_BILLING = "manage_billing"
VIEW_REPORTS = "view_reports"
MANAGE_USERS = "manage_users"
MANAGE_SETTINGS = "manage_settings"

ALL_PERMISSIONS: FrozenSet[str] = frozenset({
    VIEW_DASHBOARD, MANAGE_RESERVATIONS, MANAGE_ROOMS, MANAGE_GUESTS,
    MANAGE_POS, MANAGE_BILLING, VIEW_REPORTS, MANAGE_USERS, MANAGE_SETTINGS,
})

ROLE_PERMISSIONS: Dict[EmployeeRole, FrozenSet[str]] = {
    EmployeeRole.ADMIN: ALL_PERMISSIONS,
    EmployeeRole.MANAGER: frozenset({
        VIEW_DASHBOARD, MANAGE_RESERVATIONS, MANAGE_ROOMS, MANAGE_GUESTS,
        MANAGE_POS, MANAGE_BILLING, VIEW_REPORTS,
    }),
    EmployeeRole.FRONT_DESK: frozenset({
        VIEW_DASHBOARD, MANAGE_RESERVATIONS, MANAGE_ROOMS, MANAGE_GUESTS, MANAGE_BILLING,
    }),
    EmployeeRole.HOUSEKEEPING: frozenset({VIEW_DASHBOARD, MANAGE_ROOMS}),
    EmployeeRole.RESTAURANT: frozenset({VIEW_DASHBOARD, MANAGE_POS}),
}


def permissions_for(role: EmployeeRole) -> FrozenSet[str]:
    return ROLE_PERMISSIONS.get(EmployeeRole(role), frozenset())


def has_permission(role: EmployeeRole, code: str) -> bool:
    """admin always passes"""
    if EmployeeRole(role) == EmployeeRole.ADMIN:
        return True
    return code in permissions_for(role)
