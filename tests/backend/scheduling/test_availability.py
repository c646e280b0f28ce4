from datetime import date, datetime, time

import pytest

from backend.core import config
from backend.core.errors import ValidationError
from backend.repositories.memory import MemoryAppointmentRepository, MemoryAvailabilityRepository
from backend.scheduling.availability import AvailabilityService
from backend.scheduling.schemas import AppointmentStatus, AvailabilityWindow, BookingRequest

DOCTOR_ID = 7
PATIENT_ID = 42
MONDAY = date(2026, 1, 5)
TUESDAY = date(2026, 1, 6)


def _window(day_of_week: int, start: str, end: str, **overrides) -> AvailabilityWindow:
    return AvailabilityWindow(
        doctor_id=overrides.pop('doctor_id', DOCTOR_ID),
        day_of_week=day_of_week,
        start_time=datetime.strptime(start, '%H:%M').time(),
        end_time=datetime.strptime(end, '%H:%M').time(),
        **overrides,
    )


def _book(booking_service, at: str, on: date = MONDAY):
    return booking_service.create_appointment(
        BookingRequest(
            patient_id=PATIENT_ID,
            doctor_id=DOCTOR_ID,
            date=on,
            time=at,
            appointment_type='consultation',
        )
    )


def test_monday_window_yields_six_half_hour_slots(availability_service) -> None:
    availability_service.replace_weekly_availability(DOCTOR_ID, [_window(1, '09:00', '12:00')])

    slots = availability_service.get_available_slots(DOCTOR_ID, MONDAY)

    assert slots == [time(9, 0), time(9, 30), time(10, 0), time(10, 30), time(11, 0), time(11, 30)]


def test_accepts_iso_date_strings(availability_service) -> None:
    availability_service.replace_weekly_availability(DOCTOR_ID, [_window(1, '09:00', '10:00')])

    assert availability_service.get_available_slots(DOCTOR_ID, '2026-01-05') == [time(9, 0), time(9, 30)]


def test_returns_empty_when_no_window_for_day(availability_service) -> None:
    availability_service.replace_weekly_availability(DOCTOR_ID, [_window(1, '09:00', '12:00')])

    assert availability_service.get_available_slots(DOCTOR_ID, TUESDAY) == []


def test_returns_empty_when_day_is_disabled(availability_service) -> None:
    availability_service.replace_weekly_availability(
        DOCTOR_ID,
        [_window(1, '09:00', '12:00', is_enabled=False)],
    )

    assert availability_service.get_available_slots(DOCTOR_ID, MONDAY) == []


def test_returns_empty_for_doctor_without_settings(availability_service) -> None:
    assert availability_service.get_available_slots(99, MONDAY) == []


def test_sunday_is_day_zero(availability_service) -> None:
    availability_service.replace_weekly_availability(DOCTOR_ID, [_window(0, '10:00', '11:00')])

    assert availability_service.get_available_slots(DOCTOR_ID, date(2026, 1, 4)) == [time(10, 0), time(10, 30)]
    assert availability_service.get_available_slots(DOCTOR_ID, MONDAY) == []


@pytest.mark.parametrize('bad_date', ['05/01/2026', '2026-02-30', ''])
def test_rejects_unparseable_date(availability_service, bad_date: str) -> None:
    with pytest.raises(ValidationError):
        availability_service.get_available_slots(DOCTOR_ID, bad_date)


@pytest.mark.parametrize('bad_doctor_id', [0, -1])
def test_rejects_invalid_doctor_id(availability_service, bad_doctor_id: int) -> None:
    with pytest.raises(ValidationError):
        availability_service.get_available_slots(bad_doctor_id, MONDAY)


def test_date_override_replaces_weekly_window(availability_service) -> None:
    availability_service.replace_weekly_availability(
        DOCTOR_ID,
        [
            _window(1, '09:00', '12:00'),
            _window(1, '14:00', '15:00', date_override=MONDAY),
        ],
    )

    assert availability_service.get_available_slots(DOCTOR_ID, MONDAY) == [time(14, 0), time(14, 30)]
    assert len(availability_service.get_available_slots(DOCTOR_ID, date(2026, 1, 12))) == 6


def test_disabled_override_closes_the_day(availability_service) -> None:
    availability_service.replace_weekly_availability(DOCTOR_ID, [_window(1, '09:00', '12:00')])
    availability_service.set_date_override(
        DOCTOR_ID,
        _window(1, '09:00', '12:00', is_enabled=False, date_override=MONDAY),
    )

    assert availability_service.get_available_slots(DOCTOR_ID, MONDAY) == []


def test_booked_slot_is_excluded_until_cancelled(availability_service, booking_service) -> None:
    availability_service.replace_weekly_availability(DOCTOR_ID, [_window(1, '09:00', '10:30')])
    appointment = _book(booking_service, '09:30')

    assert availability_service.get_available_slots(DOCTOR_ID, MONDAY) == [time(9, 0), time(10, 0)]

    booking_service.update_appointment_status(appointment.id, AppointmentStatus.CANCELLED)

    assert availability_service.get_available_slots(DOCTOR_ID, MONDAY) == [time(9, 0), time(9, 30), time(10, 0)]


def test_occupancy_uses_exact_start_time_only(availability_service, booking_service) -> None:
    availability_service.replace_weekly_availability(DOCTOR_ID, [_window(1, '09:00', '10:30')])
    booking_service.create_appointment(
        BookingRequest(
            patient_id=PATIENT_ID,
            doctor_id=DOCTOR_ID,
            date=MONDAY,
            time='09:15',
            appointment_type='checkup',
            duration_minutes=60,
        )
    )

    assert availability_service.get_available_slots(DOCTOR_ID, MONDAY) == [time(9, 0), time(9, 30), time(10, 0)]


def test_repeated_calls_return_identical_results(availability_service, booking_service) -> None:
    availability_service.replace_weekly_availability(DOCTOR_ID, [_window(1, '09:00', '17:00')])
    _book(booking_service, '11:00')

    first = availability_service.get_available_slots(DOCTOR_ID, MONDAY)
    second = availability_service.get_available_slots(DOCTOR_ID, MONDAY)

    assert first == second
    assert time(11, 0) not in first


def test_weekly_availability_always_has_seven_days(availability_service) -> None:
    availability_service.replace_weekly_availability(
        DOCTOR_ID,
        [_window(1, '08:00', '12:00'), _window(3, '13:00', '18:00')],
    )

    weekly = availability_service.get_weekly_availability(DOCTOR_ID)

    assert [window.day_of_week for window in weekly] == list(range(7))
    assert weekly[1].start_time == time(8, 0)
    assert weekly[1].is_enabled is True
    assert weekly[0].is_enabled is False
    assert (weekly[0].start_time, weekly[0].end_time) == (time(9, 0), time(17, 0))


def test_weekly_availability_ignores_overrides(availability_service) -> None:
    availability_service.replace_weekly_availability(
        DOCTOR_ID,
        [_window(1, '14:00', '15:00', date_override=MONDAY)],
    )

    weekly = availability_service.get_weekly_availability(DOCTOR_ID)

    assert weekly[1].is_enabled is False
    assert availability_service.list_date_overrides(DOCTOR_ID)[0].date_override == MONDAY


def test_replace_discards_previous_windows(availability_service) -> None:
    availability_service.replace_weekly_availability(
        DOCTOR_ID,
        [_window(1, '09:00', '12:00'), _window(2, '09:00', '12:00')],
    )
    availability_service.replace_weekly_availability(DOCTOR_ID, [_window(2, '13:00', '14:00')])

    assert availability_service.get_available_slots(DOCTOR_ID, MONDAY) == []
    assert availability_service.get_available_slots(DOCTOR_ID, TUESDAY) == [time(13, 0), time(13, 30)]


@pytest.mark.parametrize(
    'windows',
    [
        [_window(1, '12:00', '09:00')],
        [_window(7, '09:00', '12:00')],
        [_window(1, '09:00', '12:00'), _window(1, '13:00', '15:00')],
        [_window(2, '09:00', '12:00', date_override=MONDAY)],
        [
            _window(1, '09:00', '12:00', date_override=MONDAY),
            _window(1, '13:00', '15:00', date_override=MONDAY),
        ],
        [_window(1, '09:00', '12:00', doctor_id=8)],
    ],
)
def test_replace_rejects_invalid_windows_without_writing(availability_service, memory_store, windows) -> None:
    availability_service.replace_weekly_availability(DOCTOR_ID, [_window(1, '09:00', '10:00')])

    with pytest.raises(ValidationError):
        availability_service.replace_weekly_availability(DOCTOR_ID, windows)

    stored = MemoryAvailabilityRepository(memory_store).list_windows(DOCTOR_ID)
    assert [(window.day_of_week, window.start_time) for window in stored] == [(1, time(9, 0))]


def test_disabled_window_may_have_any_times(availability_service) -> None:
    saved = availability_service.replace_weekly_availability(
        DOCTOR_ID,
        [_window(5, '17:00', '09:00', is_enabled=False)],
    )

    assert len(saved) == 1


def test_set_date_override_requires_a_date(availability_service) -> None:
    with pytest.raises(ValidationError):
        availability_service.set_date_override(DOCTOR_ID, _window(1, '09:00', '12:00'))


def test_set_date_override_replaces_only_that_date(availability_service) -> None:
    availability_service.replace_weekly_availability(
        DOCTOR_ID,
        [
            _window(1, '09:00', '12:00'),
            _window(2, '09:00', '10:00', date_override=TUESDAY),
        ],
    )
    availability_service.set_date_override(DOCTOR_ID, _window(1, '15:00', '16:00', date_override=MONDAY))
    availability_service.set_date_override(DOCTOR_ID, _window(1, '10:00', '11:00', date_override=MONDAY))

    overrides = availability_service.list_date_overrides(DOCTOR_ID)

    assert [window.date_override for window in overrides] == [MONDAY, TUESDAY]
    assert availability_service.get_available_slots(DOCTOR_ID, MONDAY) == [time(10, 0), time(10, 30)]


@pytest.mark.parametrize('slot_length', [0, -15])
def test_service_rejects_non_positive_slot_length(memory_store, slot_length: int) -> None:
    with pytest.raises(ValidationError):
        AvailabilityService(
            MemoryAvailabilityRepository(memory_store),
            MemoryAppointmentRepository(memory_store),
            slot_length_minutes=slot_length,
        )


def test_service_uses_configured_slot_length_by_default(memory_store, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'DEFAULT_SLOT_MINUTES', 20)
    service = AvailabilityService(MemoryAvailabilityRepository(memory_store), MemoryAppointmentRepository(memory_store))
    service.replace_weekly_availability(DOCTOR_ID, [_window(1, '09:00', '10:00')])

    assert service.get_available_slots(DOCTOR_ID, MONDAY) == [time(9, 0), time(9, 20), time(9, 40)]
