"""
Staff roles, their dashboards and the feature permission matrix.

This module is the single source of truth for role strings.  The model
layer, permission classes and the dashboard router all import from here.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

ADMIN = 'admin'
DOCTOR = 'doctor'
NURSE = 'nurse'
RECEPTION = 'reception'

ALL_ROLES: tuple[str, ...] = (ADMIN, DOCTOR, NURSE, RECEPTION)

ROLE_CHOICES = [
    (ADMIN, 'Administrator'),
    (DOCTOR, 'Doctor'),
    (NURSE, 'Nurse'),
    (RECEPTION, 'Reception'),
]

ROLE_INFO: Mapping[str, dict] = MappingProxyType({
    ADMIN: {'label': 'Administrator', 'description': 'Full system access'},
    DOCTOR: {'label': 'Doctor', 'description': 'Patient care and appointments'},
    NURSE: {'label': 'Nurse', 'description': 'Bed management and patient monitoring'},
    RECEPTION: {'label': 'Reception', 'description': 'Patient registration and scheduling'},
})

# Dashboard route per role.  Read-only; lookups go through dashboard_route_for().
DASHBOARD_ROUTES: Mapping[str, str] = MappingProxyType({
    ADMIN: '/dashboard/admin',
    DOCTOR: '/dashboard/doctor',
    NURSE: '/dashboard/nurse',
    RECEPTION: '/dashboard/reception',
})
DEFAULT_DASHBOARD_ROUTE = DASHBOARD_ROUTES[RECEPTION]

# Feature permissions matrix: feature -> set of roles allowed.
ROLE_PERMISSIONS: Mapping[str, frozenset] = MappingProxyType({
    # Bed management
    'viewBeds': frozenset({ADMIN, NURSE, RECEPTION}),
    'assignBed': frozenset({ADMIN, NURSE, RECEPTION}),
    'dischargeBed': frozenset({ADMIN, DOCTOR, NURSE}),
    # Patient management
    'viewPatients': frozenset({ADMIN, DOCTOR, NURSE, RECEPTION}),
    'editPatient': frozenset({ADMIN, DOCTOR, RECEPTION}),
    # Appointments
    'viewAppointments': frozenset({ADMIN, DOCTOR, NURSE, RECEPTION}),
    'scheduleAppointment': frozenset({ADMIN, DOCTOR, RECEPTION}),
    # Reports & system settings
    'viewReports': frozenset({ADMIN}),
    'manageUsers': frozenset({ADMIN}),
    'sendNotifications': frozenset({ADMIN}),
})


def is_known_role(role: Optional[str]) -> bool:
    return isinstance(role, str) and role in DASHBOARD_ROUTES


def dashboard_route_for(role: Optional[str]) -> str:
    """Return the dashboard path for ``role``; unknown or missing roles get the default."""
    if not is_known_role(role):
        return DEFAULT_DASHBOARD_ROUTE
    return DASHBOARD_ROUTES[role]


def get_role_info(role: str) -> dict:
    return dict(ROLE_INFO.get(role) or {'label': role, 'description': ''})


def has_permission(role: Optional[str], feature: str) -> bool:
    return is_known_role(role) and role in ROLE_PERMISSIONS.get(feature, frozenset())


def permissions_for(role: Optional[str]) -> dict[str, bool]:
    """Return the full feature map for ``role`` (all False for unknown roles)."""
    return {feature: has_permission(role, feature) for feature in ROLE_PERMISSIONS}
