"""Doctor availability: weekly settings, date overrides and bookable slots."""

import logging
from datetime import date, time

from backend.core import config
from backend.core.errors import ValidationError
from backend.repositories.base import AppointmentRepository, AvailabilityRepository
from backend.scheduling.schemas import AvailabilityWindow
from backend.scheduling.slots import generate_slots, validate_slot_length
from backend.scheduling.timeutils import day_of_week, parse_calendar_date, parse_clock_time

logger = logging.getLogger(__name__)

DAYS_IN_WEEK = 7


def validate_doctor_id(doctor_id: int) -> int:
    if isinstance(doctor_id, bool) or not isinstance(doctor_id, int) or doctor_id <= 0:
        raise ValidationError('Doctor id must be a positive integer.')
    return doctor_id


def validate_window(window: AvailabilityWindow) -> None:
    if not 0 <= window.day_of_week < DAYS_IN_WEEK:
        raise ValidationError('Day of week must be between 0 (Sunday) and 6 (Saturday).')
    if window.is_enabled and window.start_time >= window.end_time:
        raise ValidationError('Start time must be before end time.')
    if window.date_override is not None and day_of_week(window.date_override) != window.day_of_week:
        raise ValidationError('Override day of week does not match its date.')


def validate_windows(windows: list[AvailabilityWindow]) -> None:
    weekly_days: set[int] = set()
    override_dates: set[date] = set()

    for window in windows:
        validate_window(window)
        if window.date_override is None:
            if window.day_of_week in weekly_days:
                raise ValidationError('Only one weekly window is allowed per day.')
            weekly_days.add(window.day_of_week)
        else:
            if window.date_override in override_dates:
                raise ValidationError('Only one override is allowed per date.')
            override_dates.add(window.date_override)


def default_window(doctor_id: int, weekday: int) -> AvailabilityWindow:
    return AvailabilityWindow(
        doctor_id=doctor_id,
        day_of_week=weekday,
        start_time=parse_clock_time(config.DEFAULT_WINDOW_START),
        end_time=parse_clock_time(config.DEFAULT_WINDOW_END),
        is_enabled=False,
    )


class AvailabilityService:
    """Reads and writes doctor availability and resolves bookable slots.

    Slot resolution never writes, so repeated calls with no intervening
    bookings return the same list.
    """

    def __init__(
        self,
        availability: AvailabilityRepository,
        appointments: AppointmentRepository,
        slot_length_minutes: int | None = None,
    ) -> None:
        self.availability = availability
        self.appointments = appointments
        self.slot_length_minutes = validate_slot_length(slot_length_minutes)

    def resolve_window(self, doctor_id: int, on_date: date) -> AvailabilityWindow | None:
        weekday = day_of_week(on_date)
        weekly_window = None

        for window in self.availability.list_windows(doctor_id):
            if window.date_override == on_date:
                return window
            if window.date_override is None and window.day_of_week == weekday:
                weekly_window = window

        return weekly_window

    def get_available_slots(self, doctor_id: int, on_date: str | date) -> list[time]:
        validate_doctor_id(doctor_id)
        slot_date = parse_calendar_date(on_date)

        window = self.resolve_window(doctor_id, slot_date)
        if window is None or not window.is_enabled:
            return []

        candidates = generate_slots(window.start_time, window.end_time, self.slot_length_minutes)
        occupied = self.appointments.booked_times(doctor_id, slot_date)

        return [slot for slot in candidates if slot not in occupied]

    def get_weekly_availability(self, doctor_id: int) -> list[AvailabilityWindow]:
        validate_doctor_id(doctor_id)
        stored = {
            window.day_of_week: window
            for window in self.availability.list_windows(doctor_id)
            if window.date_override is None
        }
        return [stored.get(weekday) or default_window(doctor_id, weekday) for weekday in range(DAYS_IN_WEEK)]

    def replace_weekly_availability(
        self,
        doctor_id: int,
        windows: list[AvailabilityWindow],
    ) -> list[AvailabilityWindow]:
        validate_doctor_id(doctor_id)
        for window in windows:
            if window.doctor_id != doctor_id:
                raise ValidationError('Availability entries must belong to the doctor being updated.')
        validate_windows(windows)

        saved = self.availability.replace_windows(doctor_id, windows)
        logger.info('Replaced availability for doctor %s with %d windows', doctor_id, len(saved))
        return saved

    def list_date_overrides(self, doctor_id: int) -> list[AvailabilityWindow]:
        validate_doctor_id(doctor_id)
        overrides = [window for window in self.availability.list_windows(doctor_id) if window.date_override]
        return sorted(overrides, key=lambda window: window.date_override)

    def set_date_override(self, doctor_id: int, window: AvailabilityWindow) -> AvailabilityWindow:
        validate_doctor_id(doctor_id)
        if window.date_override is None:
            raise ValidationError('An override needs a date.')
        if window.doctor_id != doctor_id:
            raise ValidationError('Availability entries must belong to the doctor being updated.')
        validate_window(window)

        saved = self.availability.replace_date_override(doctor_id, window)
        logger.info('Saved availability override for doctor %s on %s', doctor_id, window.date_override)
        return saved
