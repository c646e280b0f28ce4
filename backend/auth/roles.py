"""Roles, capabilities and the static table that connects them."""

from enum import Enum


class Role(str, Enum):
    DOCTOR = 'doctor'
    NURSE = 'nurse'
    ADMIN = 'admin'
    RECEPTIONIST = 'receptionist'
    PHARMACIST = 'pharmacist'

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]


class Capability(str, Enum):
    VIEW_DASHBOARD = 'view_dashboard'
    VIEW_PATIENTS = 'view_patients'
    REGISTER_PATIENTS = 'register_patients'
    VIEW_APPOINTMENTS = 'view_appointments'
    BOOK_APPOINTMENTS = 'book_appointments'
    UPDATE_APPOINTMENT_STATUS = 'update_appointment_status'
    VIEW_SCHEDULES = 'view_schedules'
    MANAGE_AVAILABILITY = 'manage_availability'
    VIEW_MEDICAL_RECORDS = 'view_medical_records'
    WRITE_MEDICAL_RECORDS = 'write_medical_records'
    MANAGE_USERS = 'manage_users'
    MANAGE_ROLES = 'manage_roles'


ROLE_LABELS: dict[Role, str] = {
    Role.DOCTOR: 'Doctor',
    Role.NURSE: 'Nurse',
    Role.ADMIN: 'Administrator',
    Role.RECEPTIONIST: 'Receptionist',
    Role.PHARMACIST: 'Pharmacist',
}

_CLINICAL_STAFF = frozenset({Role.DOCTOR, Role.NURSE, Role.ADMIN, Role.RECEPTIONIST})

CAPABILITY_ROLES: dict[Capability, frozenset[Role]] = {
    Capability.VIEW_DASHBOARD: frozenset(Role),
    Capability.VIEW_PATIENTS: _CLINICAL_STAFF,
    Capability.REGISTER_PATIENTS: frozenset({Role.RECEPTIONIST, Role.ADMIN}),
    Capability.VIEW_APPOINTMENTS: _CLINICAL_STAFF,
    Capability.BOOK_APPOINTMENTS: frozenset({Role.RECEPTIONIST, Role.ADMIN}),
    Capability.UPDATE_APPOINTMENT_STATUS: _CLINICAL_STAFF,
    Capability.VIEW_SCHEDULES: _CLINICAL_STAFF,
    Capability.MANAGE_AVAILABILITY: frozenset({Role.DOCTOR, Role.ADMIN}),
    Capability.VIEW_MEDICAL_RECORDS: frozenset({Role.DOCTOR, Role.NURSE, Role.RECEPTIONIST}),
    Capability.WRITE_MEDICAL_RECORDS: frozenset({Role.DOCTOR}),
    Capability.MANAGE_USERS: frozenset({Role.ADMIN}),
    Capability.MANAGE_ROLES: frozenset({Role.ADMIN}),
}

ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    role: frozenset(capability for capability, roles in CAPABILITY_ROLES.items() if role in roles)
    for role in Role
}

# Front-end route paths and the capability each one needs.
ROUTE_ACCESS: dict[str, Capability] = {
    '/': Capability.VIEW_DASHBOARD,
    '/patients': Capability.VIEW_PATIENTS,
    '/patients/new': Capability.REGISTER_PATIENTS,
    '/patients/:id': Capability.VIEW_PATIENTS,
    '/patients/:id/edit': Capability.VIEW_PATIENTS,
    '/appointments': Capability.VIEW_APPOINTMENTS,
    '/appointments/new': Capability.BOOK_APPOINTMENTS,
    '/schedule': Capability.VIEW_SCHEDULES,
    '/availability': Capability.MANAGE_AVAILABILITY,
    '/medical-records': Capability.VIEW_MEDICAL_RECORDS,
    '/medical-records/new': Capability.WRITE_MEDICAL_RECORDS,
    '/medical-records/:id': Capability.VIEW_MEDICAL_RECORDS,
    '/admin/users': Capability.MANAGE_USERS,
    '/admin/roles': Capability.MANAGE_ROLES,
}


def parse_role(value: str | Role) -> Role:
    if isinstance(value, Role):
        return value
    try:
        return Role(value.strip().lower())
    except ValueError as exc:
        raise ValueError(f'Unknown role: {value!r}') from exc


def has_capability(role: Role | str, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES[parse_role(role)]


def can_access_route(role: Role | str, path: str) -> bool:
    capability = ROUTE_ACCESS.get(path)
    if capability is None:
        return False
    return has_capability(role, capability)


def capabilities_for(role: Role | str) -> list[str]:
    return sorted(capability.value for capability in ROLE_CAPABILITIES[parse_role(role)])
