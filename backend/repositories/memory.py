"""In-process record stores.

Used as the ``memory`` data backend during front-end development and as the
fake behind the scheduling tests. State lives on a ``MemoryStore`` so callers
can share or isolate it explicitly.
"""

from datetime import date, datetime, time
from threading import Lock

from backend.core.errors import ConflictError, NotFoundError
from backend.repositories.base import DirectoryRepository
from backend.scheduling.schemas import (
    AppointmentFilters,
    AppointmentRecord,
    AppointmentStatus,
    AvailabilityWindow,
    HUMAN_ID_PREFIX,
    NewAppointment,
    format_human_id,
)


class MemoryStore:
    def __init__(self) -> None:
        self.lock = Lock()
        self.windows: dict[int, list[AvailabilityWindow]] = {}
        self.appointments: dict[int, AppointmentRecord] = {}
        self.doctors: dict[int, bool] = {}
        self.patients: dict[int, bool] = {}
        self._next_appointment_id = 1

    def add_doctor(self, doctor_id: int, is_active: bool = True) -> None:
        self.doctors[doctor_id] = is_active

    def add_patient(self, patient_id: int, is_active: bool = True) -> None:
        self.patients[patient_id] = is_active

    def seed_directory(self, doctor_ids: list[int], patient_ids: list[int]) -> None:
        for doctor_id in doctor_ids:
            self.add_doctor(doctor_id)
        for patient_id in patient_ids:
            self.add_patient(patient_id)

    def allocate_appointment_id(self) -> int:
        appointment_id = self._next_appointment_id
        self._next_appointment_id += 1
        return appointment_id


class MemoryAvailabilityRepository:
    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    def list_windows(self, doctor_id: int) -> list[AvailabilityWindow]:
        windows = self.store.windows.get(doctor_id, [])
        return sorted(
            (window.model_copy() for window in windows),
            key=lambda window: (window.day_of_week, window.date_override or date.min),
        )

    def replace_windows(self, doctor_id: int, windows: list[AvailabilityWindow]) -> list[AvailabilityWindow]:
        replacement = [window.model_copy(update={'doctor_id': doctor_id}) for window in windows]
        with self.store.lock:
            self.store.windows[doctor_id] = replacement
        return self.list_windows(doctor_id)

    def replace_date_override(self, doctor_id: int, window: AvailabilityWindow) -> AvailabilityWindow:
        override = window.model_copy(update={'doctor_id': doctor_id})
        with self.store.lock:
            kept = [
                existing
                for existing in self.store.windows.get(doctor_id, [])
                if existing.date_override != window.date_override
            ]
            self.store.windows[doctor_id] = [*kept, override]
        return override.model_copy()


class MemoryAppointmentRepository:
    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    def add(self, appointment: NewAppointment) -> AppointmentRecord:
        with self.store.lock:
            if (
                appointment.status != AppointmentStatus.CANCELLED
                and appointment.time in self._booked_times(appointment.doctor_id, appointment.date)
            ):
                raise ConflictError('This time is already booked.')

            human_id = appointment.human_id
            if human_id is None:
                year = appointment.created_at.year
                human_id = format_human_id(year, self._next_sequence(year))

            record = AppointmentRecord(
                id=self.store.allocate_appointment_id(),
                **appointment.model_dump(exclude={'human_id'}),
                human_id=human_id,
            )
            self.store.appointments[record.id] = record
        return record.model_copy()

    def get(self, appointment_id: int) -> AppointmentRecord | None:
        record = self.store.appointments.get(appointment_id)
        return record.model_copy() if record else None

    def find(self, filters: AppointmentFilters) -> list[AppointmentRecord]:
        matches = [
            record.model_copy()
            for record in self.store.appointments.values()
            if (filters.doctor_id is None or record.doctor_id == filters.doctor_id)
            and (filters.patient_id is None or record.patient_id == filters.patient_id)
            and (filters.date is None or record.date == filters.date)
            and (filters.status is None or record.status == filters.status)
        ]
        return sorted(matches, key=lambda record: (record.date, record.time, record.id))

    def update_status(
        self,
        appointment_id: int,
        status: AppointmentStatus,
        updated_at: datetime,
        expected: AppointmentStatus | None = None,
    ) -> AppointmentRecord:
        with self.store.lock:
            record = self.store.appointments.get(appointment_id)
            if record is None:
                raise NotFoundError('Appointment not found.')
            if expected is not None and record.status != expected:
                raise ConflictError('This appointment was changed by someone else. Reload and try again.')
            updated = record.model_copy(update={'status': status, 'updated_at': updated_at})
            self.store.appointments[appointment_id] = updated
        return updated.model_copy()

    def booked_times(self, doctor_id: int, on_date: date) -> set[time]:
        with self.store.lock:
            return self._booked_times(doctor_id, on_date)

    def next_sequence(self, year: int) -> int:
        with self.store.lock:
            return self._next_sequence(year)

    # Callers hold store.lock.
    def _booked_times(self, doctor_id: int, on_date: date) -> set[time]:
        return {
            record.time
            for record in self.store.appointments.values()
            if record.doctor_id == doctor_id
            and record.date == on_date
            and record.status != AppointmentStatus.CANCELLED
        }

    def _next_sequence(self, year: int) -> int:
        prefix = f'{HUMAN_ID_PREFIX}-{year}-'
        suffixes = [
            int(record.human_id[len(prefix):])
            for record in self.store.appointments.values()
            if record.human_id.startswith(prefix) and record.human_id[len(prefix):].isdigit()
        ]
        return max(suffixes, default=0) + 1


class MemoryDirectoryRepository:
    """Doctors and patients registered on the store.

    Ids the store has never seen are looked up in ``fallback`` when one is
    given, so the memory backend can book against the real staff and patient
    tables.
    """

    def __init__(self, store: MemoryStore, fallback: DirectoryRepository | None = None) -> None:
        self.store = store
        self.fallback = fallback

    def is_active_doctor(self, doctor_id: int) -> bool:
        if doctor_id in self.store.doctors:
            return self.store.doctors[doctor_id]
        return self.fallback is not None and self.fallback.is_active_doctor(doctor_id)

    def is_active_patient(self, patient_id: int) -> bool:
        if patient_id in self.store.patients:
            return self.store.patients[patient_id]
        return self.fallback is not None and self.fallback.is_active_patient(patient_id)
