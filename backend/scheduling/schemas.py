"""Value types shared by the scheduling core and its record stores."""

import datetime as dt
from enum import Enum

from pydantic import BaseModel


class AppointmentStatus(str, Enum):
    SCHEDULED = 'scheduled'
    CONFIRMED = 'confirmed'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    NO_SHOW = 'no_show'


TERMINAL_STATUSES = frozenset({
    AppointmentStatus.CANCELLED,
    AppointmentStatus.COMPLETED,
    AppointmentStatus.NO_SHOW,
})

ALLOWED_STATUS_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.NO_SHOW,
    }),
    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.CANCELLED,
        AppointmentStatus.COMPLETED,
    }),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}

APPOINTMENT_TYPES = ('consultation', 'follow-up', 'checkup', 'emergency')

HUMAN_ID_PREFIX = 'APT'


def format_human_id(year: int, sequence: int) -> str:
    return f'{HUMAN_ID_PREFIX}-{year}-{sequence:03d}'


class AvailabilityWindow(BaseModel):
    doctor_id: int
    day_of_week: int
    start_time: dt.time
    end_time: dt.time
    is_enabled: bool = True
    date_override: dt.date | None = None

    class Config:
        from_attributes = True


class AppointmentRecord(BaseModel):
    id: int
    human_id: str
    patient_id: int
    doctor_id: int
    date: dt.date
    time: dt.time
    duration_minutes: int
    status: AppointmentStatus
    appointment_type: str
    reason: str | None = None
    notes: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True


class NewAppointment(BaseModel):
    # Numbered by the record store at insert time when unset.
    human_id: str | None = None
    patient_id: int
    doctor_id: int
    date: dt.date
    time: dt.time
    duration_minutes: int
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    appointment_type: str
    reason: str | None = None
    notes: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime


class AppointmentFilters(BaseModel):
    doctor_id: int | None = None
    patient_id: int | None = None
    date: dt.date | None = None
    status: AppointmentStatus | None = None


class BookingRequest(BaseModel):
    """Raw booking input; the booking service validates every field."""

    patient_id: int | None = None
    doctor_id: int | None = None
    date: str | dt.date | None = None
    time: str | dt.time | None = None
    appointment_type: str | None = None
    duration_minutes: int | None = None
    reason: str | None = None
    notes: str | None = None
