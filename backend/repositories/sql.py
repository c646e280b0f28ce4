import logging
from datetime import date, datetime, time

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.roles import Role
from backend.core.errors import ConflictError, NotFoundError, PersistenceError
from backend.models.appointment import Appointment
from backend.models.availability import DoctorAvailability
from backend.models.patient import Patient
from backend.models.user import User
from backend.scheduling.schemas import (
    AppointmentFilters,
    AppointmentRecord,
    AppointmentStatus,
    AvailabilityWindow,
    HUMAN_ID_PREFIX,
    NewAppointment,
    format_human_id,
)

logger = logging.getLogger(__name__)

NUMBERING_ATTEMPTS = 3


def _to_row(doctor_id: int, window: AvailabilityWindow) -> DoctorAvailability:
    return DoctorAvailability(
        doctor_id=doctor_id,
        day_of_week=window.day_of_week,
        start_time=window.start_time,
        end_time=window.end_time,
        is_enabled=window.is_enabled,
        date_override=window.date_override,
        created_at=datetime.now(),
    )


class SqlAvailabilityRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_windows(self, doctor_id: int) -> list[AvailabilityWindow]:
        try:
            rows = self.db.query(DoctorAvailability).filter(
                DoctorAvailability.doctor_id == doctor_id,
            ).order_by(
                DoctorAvailability.day_of_week.asc(),
                DoctorAvailability.date_override.asc(),
            ).all()
        except SQLAlchemyError as exc:
            logger.exception('Failed to load availability for doctor %s', doctor_id)
            raise PersistenceError('Database unavailable. Could not load availability.') from exc

        return [AvailabilityWindow.model_validate(row) for row in rows]

    def replace_windows(self, doctor_id: int, windows: list[AvailabilityWindow]) -> list[AvailabilityWindow]:
        try:
            self.db.query(DoctorAvailability).filter(
                DoctorAvailability.doctor_id == doctor_id,
            ).delete(synchronize_session=False)
            self.db.add_all([_to_row(doctor_id, window) for window in windows])
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to replace availability for doctor %s', doctor_id)
            raise PersistenceError('Could not save availability. Please try again.') from exc

        return self.list_windows(doctor_id)

    def replace_date_override(self, doctor_id: int, window: AvailabilityWindow) -> AvailabilityWindow:
        try:
            self.db.query(DoctorAvailability).filter(
                DoctorAvailability.doctor_id == doctor_id,
                DoctorAvailability.date_override == window.date_override,
            ).delete(synchronize_session=False)
            row = _to_row(doctor_id, window)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to save availability override for doctor %s', doctor_id)
            raise PersistenceError('Could not save availability. Please try again.') from exc

        return AvailabilityWindow.model_validate(row)


class SqlAppointmentRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def add(self, appointment: NewAppointment) -> AppointmentRecord:
        year = appointment.created_at.year

        for attempt in range(1, NUMBERING_ATTEMPTS + 1):
            human_id = appointment.human_id or format_human_id(year, self.next_sequence(year))
            row = Appointment(
                human_id=human_id,
                patient_id=appointment.patient_id,
                doctor_id=appointment.doctor_id,
                date=appointment.date,
                time=appointment.time,
                duration_minutes=appointment.duration_minutes,
                status=appointment.status.value,
                appointment_type=appointment.appointment_type,
                reason=appointment.reason,
                notes=appointment.notes,
                created_at=appointment.created_at,
                updated_at=appointment.updated_at,
            )
            try:
                self.db.add(row)
                self.db.commit()
                self.db.refresh(row)
            except IntegrityError as exc:
                self.db.rollback()
                if (
                    appointment.status != AppointmentStatus.CANCELLED
                    and appointment.time in self.booked_times(appointment.doctor_id, appointment.date)
                ):
                    raise ConflictError('This time is already booked.') from exc
                if appointment.human_id is None and attempt < NUMBERING_ATTEMPTS:
                    logger.warning('Appointment number %s was taken concurrently; renumbering', human_id)
                    continue
                logger.exception('Failed to save appointment %s', human_id)
                raise PersistenceError('Could not book the appointment. Please try again.') from exc
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.exception('Failed to save appointment %s', human_id)
                raise PersistenceError('Could not book the appointment. Please try again.') from exc

            return AppointmentRecord.model_validate(row)

        raise PersistenceError('Could not book the appointment. Please try again.')

    def get(self, appointment_id: int) -> AppointmentRecord | None:
        try:
            row = self.db.query(Appointment).filter(Appointment.id == appointment_id).first()
        except SQLAlchemyError as exc:
            raise PersistenceError('Database unavailable. Could not load the appointment.') from exc

        if row is None:
            return None
        return AppointmentRecord.model_validate(row)

    def find(self, filters: AppointmentFilters) -> list[AppointmentRecord]:
        query = self.db.query(Appointment)
        if filters.doctor_id is not None:
            query = query.filter(Appointment.doctor_id == filters.doctor_id)
        if filters.patient_id is not None:
            query = query.filter(Appointment.patient_id == filters.patient_id)
        if filters.date is not None:
            query = query.filter(Appointment.date == filters.date)
        if filters.status is not None:
            query = query.filter(Appointment.status == filters.status.value)

        try:
            rows = query.order_by(Appointment.date.asc(), Appointment.time.asc(), Appointment.id.asc()).all()
        except SQLAlchemyError as exc:
            raise PersistenceError('Database unavailable. Could not load appointments.') from exc

        return [AppointmentRecord.model_validate(row) for row in rows]

    def update_status(
        self,
        appointment_id: int,
        status: AppointmentStatus,
        updated_at: datetime,
        expected: AppointmentStatus | None = None,
    ) -> AppointmentRecord:
        try:
            query = self.db.query(Appointment).filter(Appointment.id == appointment_id)
            if expected is not None:
                query = query.filter(Appointment.status == expected.value)

            changed = query.update(
                {Appointment.status: status.value, Appointment.updated_at: updated_at},
                synchronize_session=False,
            )
            if not changed:
                self.db.rollback()
                exists = self.db.query(Appointment.id).filter(Appointment.id == appointment_id).first()
                if exists is None:
                    raise NotFoundError('Appointment not found.')
                raise ConflictError('This appointment was changed by someone else. Reload and try again.')

            self.db.commit()
            row = self.db.query(Appointment).filter(Appointment.id == appointment_id).one()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to update status of appointment %s', appointment_id)
            raise PersistenceError('Could not update the appointment. Please try again.') from exc

        return AppointmentRecord.model_validate(row)

    def booked_times(self, doctor_id: int, on_date: date) -> set[time]:
        try:
            rows = self.db.query(Appointment.time).filter(
                Appointment.doctor_id == doctor_id,
                Appointment.date == on_date,
                Appointment.status != AppointmentStatus.CANCELLED.value,
            ).all()
        except SQLAlchemyError as exc:
            raise PersistenceError('Database unavailable. Could not load appointments.') from exc

        return {booked_time.replace(second=0, microsecond=0) for (booked_time,) in rows}

    def next_sequence(self, year: int) -> int:
        prefix = f'{HUMAN_ID_PREFIX}-{year}-'
        try:
            human_ids = self.db.query(Appointment.human_id).filter(
                Appointment.human_id.like(f'{prefix}%'),
            ).all()
        except SQLAlchemyError as exc:
            raise PersistenceError('Database unavailable. Could not number the appointment.') from exc

        highest = 0
        for (human_id,) in human_ids:
            suffix = human_id[len(prefix):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return highest + 1


class SqlDirectoryRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def is_active_doctor(self, doctor_id: int) -> bool:
        try:
            doctor = self.db.query(User).filter(
                User.id == doctor_id,
                User.role == Role.DOCTOR,
            ).first()
        except SQLAlchemyError as exc:
            raise PersistenceError('Database unavailable. Could not look up the doctor.') from exc

        return doctor is not None and bool(doctor.is_active)

    def is_active_patient(self, patient_id: int) -> bool:
        try:
            patient = self.db.query(Patient).filter(Patient.id == patient_id).first()
        except SQLAlchemyError as exc:
            raise PersistenceError('Database unavailable. Could not look up the patient.') from exc

        return patient is not None and (patient.status or 'active') == 'active'
