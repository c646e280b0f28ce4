from datetime import time

import pytest

from backend.core.errors import ValidationError
from backend.scheduling.slots import generate_slots


def test_generate_slots_covers_full_working_day() -> None:
    slots = generate_slots('09:00', '17:00', 30)

    assert len(slots) == 16
    assert slots[0] == time(9, 0)
    assert slots[-1] == time(16, 30)


def test_generate_slots_defaults_to_thirty_minutes() -> None:
    assert generate_slots(time(9, 0), time(10, 30)) == [time(9, 0), time(9, 30), time(10, 0)]


@pytest.mark.parametrize(('start', 'end'), [('12:00', '12:00'), ('17:00', '09:00')])
def test_generate_slots_returns_empty_for_empty_or_inverted_window(start: str, end: str) -> None:
    assert generate_slots(start, end, 30) == []


def test_generate_slots_drops_trailing_partial_slot() -> None:
    assert generate_slots('09:00', '10:45', 30) == [time(9, 0), time(9, 30), time(10, 0)]


def test_generate_slots_is_strictly_ascending() -> None:
    slots = generate_slots('08:15', '11:50', 20)

    assert slots == sorted(set(slots))
    assert slots[-1] == time(11, 15)


def test_generate_slots_returns_a_fresh_list_each_call() -> None:
    first = generate_slots('09:00', '10:00', 15)
    first.clear()

    assert generate_slots('09:00', '10:00', 15) == [time(9, 0), time(9, 15), time(9, 30), time(9, 45)]


@pytest.mark.parametrize('slot_length', [0, -30])
def test_generate_slots_rejects_non_positive_length(slot_length: int) -> None:
    with pytest.raises(ValidationError):
        generate_slots('09:00', '17:00', slot_length)


@pytest.mark.parametrize('bad_time', ['9am', '25:00', '', '09:00:00'])
def test_generate_slots_rejects_malformed_times(bad_time: str) -> None:
    with pytest.raises(ValidationError):
        generate_slots(bad_time, '17:00', 30)
