"""Record store interfaces the scheduling core depends on.

Implementations raise ``PersistenceError`` when the underlying store rejects
a write; they never partially apply one.
"""

from datetime import date, datetime, time
from typing import Protocol

from backend.scheduling.schemas import (
    AppointmentFilters,
    AppointmentRecord,
    AppointmentStatus,
    AvailabilityWindow,
    NewAppointment,
)


class AvailabilityRepository(Protocol):
    def list_windows(self, doctor_id: int) -> list[AvailabilityWindow]:
        ...

    def replace_windows(self, doctor_id: int, windows: list[AvailabilityWindow]) -> list[AvailabilityWindow]:
        """Delete every stored window of the doctor and insert ``windows`` in one commit."""
        ...

    def replace_date_override(self, doctor_id: int, window: AvailabilityWindow) -> AvailabilityWindow:
        """Swap the override stored for ``window.date_override`` in one commit."""
        ...


class AppointmentRepository(Protocol):
    def add(self, appointment: NewAppointment) -> AppointmentRecord:
        """Store the appointment, numbering it when ``human_id`` is unset.

        The occupancy check, the numbering and the insert happen as one unit;
        raises ``ConflictError`` when a non-cancelled appointment already holds
        the same doctor, date and time.
        """
        ...

    def get(self, appointment_id: int) -> AppointmentRecord | None:
        ...

    def find(self, filters: AppointmentFilters) -> list[AppointmentRecord]:
        """Matching appointments ordered by date, then time."""
        ...

    def update_status(
        self,
        appointment_id: int,
        status: AppointmentStatus,
        updated_at: datetime,
        expected: AppointmentStatus | None = None,
    ) -> AppointmentRecord:
        """Set the status, provided it still equals ``expected`` when one is given.

        Raises ``ConflictError`` when another writer changed the status first.
        """
        ...

    def booked_times(self, doctor_id: int, on_date: date) -> set[time]:
        """Start times of the doctor's non-cancelled appointments on ``on_date``."""
        ...

    def next_sequence(self, year: int) -> int:
        """Next human identifier sequence number for ``year``, starting at 1."""
        ...


class DirectoryRepository(Protocol):
    def is_active_doctor(self, doctor_id: int) -> bool:
        ...

    def is_active_patient(self, patient_id: int) -> bool:
        ...
