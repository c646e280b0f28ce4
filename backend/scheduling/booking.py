"""Appointment booking and status changes."""

import logging
from collections.abc import Callable
from datetime import date, datetime

from backend.core import config
from backend.core.errors import ConflictError, NotFoundError, ValidationError
from backend.repositories.base import AppointmentRepository, DirectoryRepository
from backend.scheduling.availability import AvailabilityService
from backend.scheduling.schemas import (
    ALLOWED_STATUS_TRANSITIONS,
    APPOINTMENT_TYPES,
    AppointmentFilters,
    AppointmentRecord,
    AppointmentStatus,
    BookingRequest,
    NewAppointment,
)
from backend.scheduling.timeutils import parse_calendar_date, parse_clock_time

logger = logging.getLogger(__name__)


def parse_status(value: str | AppointmentStatus) -> AppointmentStatus:
    if isinstance(value, AppointmentStatus):
        return value
    try:
        return AppointmentStatus(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f'Unknown appointment status: {value}.') from exc


def _require_id(value: int | None, label: str) -> int:
    if value is None:
        raise ValidationError(f'{label} is required.')
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f'{label} must be a positive integer.')
    return value


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


class BookingService:
    def __init__(
        self,
        appointments: AppointmentRepository,
        directory: DirectoryRepository,
        availability: AvailabilityService,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.appointments = appointments
        self.directory = directory
        self.availability = availability
        self.clock = clock

    def create_appointment(self, request: BookingRequest) -> AppointmentRecord:
        patient_id = _require_id(request.patient_id, 'Patient')
        doctor_id = _require_id(request.doctor_id, 'Doctor')

        if request.date is None:
            raise ValidationError('Date is required.')
        if request.time is None:
            raise ValidationError('Time is required.')
        appointment_date = parse_calendar_date(request.date)
        appointment_time = parse_clock_time(request.time)

        appointment_type = (request.appointment_type or '').strip().lower()
        if not appointment_type:
            raise ValidationError('Type is required.')
        if appointment_type not in APPOINTMENT_TYPES:
            raise ValidationError('Invalid appointment type.')

        duration_minutes = request.duration_minutes
        if duration_minutes is None:
            duration_minutes = config.DEFAULT_APPOINTMENT_DURATION_MINUTES
        if duration_minutes < config.MIN_APPOINTMENT_DURATION_MINUTES:
            raise ValidationError(
                f'Minimum duration is {config.MIN_APPOINTMENT_DURATION_MINUTES} minutes.'
            )

        notes = _clean_text(request.notes)
        if notes and len(notes) > config.MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValidationError(f'Notes must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

        now = self.clock()
        if not config.ALLOW_PAST_BOOKINGS and appointment_date < now.date():
            raise ValidationError('Appointments must be scheduled for today or a later date.')

        if not self.directory.is_active_patient(patient_id):
            raise NotFoundError('Patient not found.')
        if not self.directory.is_active_doctor(doctor_id):
            raise NotFoundError('Doctor not found.')

        if appointment_time in self.appointments.booked_times(doctor_id, appointment_date):
            raise ConflictError('This time is already booked.')

        if config.BOOKING_REQUIRES_LISTED_SLOT:
            open_slots = self.availability.get_available_slots(doctor_id, appointment_date)
            if appointment_time not in open_slots:
                raise ConflictError("This time is outside the doctor's availability.")

        # The store re-checks occupancy and numbers the appointment atomically.
        appointment = self.appointments.add(
            NewAppointment(
                patient_id=patient_id,
                doctor_id=doctor_id,
                date=appointment_date,
                time=appointment_time,
                duration_minutes=duration_minutes,
                status=AppointmentStatus.SCHEDULED,
                appointment_type=appointment_type,
                reason=_clean_text(request.reason),
                notes=notes,
                created_at=now,
                updated_at=now,
            )
        )

        logger.info(
            'Booked %s for patient %s with doctor %s on %s at %s',
            appointment.human_id,
            patient_id,
            doctor_id,
            appointment_date,
            appointment_time,
        )
        return appointment

    def get_appointment(self, appointment_id: int) -> AppointmentRecord:
        appointment = self.appointments.get(_require_id(appointment_id, 'Appointment'))
        if appointment is None:
            raise NotFoundError('Appointment not found.')
        return appointment

    def list_appointments(
        self,
        doctor_id: int | None = None,
        patient_id: int | None = None,
        on_date: str | date | None = None,
        status: str | AppointmentStatus | None = None,
    ) -> list[AppointmentRecord]:
        filters = AppointmentFilters(
            doctor_id=doctor_id,
            patient_id=patient_id,
            date=parse_calendar_date(on_date) if on_date is not None else None,
            status=parse_status(status) if status is not None else None,
        )
        return self.appointments.find(filters)

    def update_appointment_status(
        self,
        appointment_id: int,
        new_status: str | AppointmentStatus,
    ) -> AppointmentRecord:
        target = parse_status(new_status)
        appointment = self.get_appointment(appointment_id)

        if target not in ALLOWED_STATUS_TRANSITIONS[appointment.status]:
            raise ValidationError(
                f'Cannot change an appointment from {appointment.status.value} to {target.value}.'
            )

        updated = self.appointments.update_status(
            appointment.id,
            target,
            self.clock(),
            expected=appointment.status,
        )
        logger.info(
            'Appointment %s moved from %s to %s',
            appointment.human_id,
            appointment.status.value,
            target.value,
        )
        return updated

    def cancel_appointment(self, appointment_id: int) -> AppointmentRecord:
        return self.update_appointment_status(appointment_id, AppointmentStatus.CANCELLED)
