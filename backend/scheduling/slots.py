from datetime import time

from backend.core import config
from backend.core.errors import ValidationError
from backend.scheduling.timeutils import minutes_since_midnight, parse_clock_time, time_from_minutes


def validate_slot_length(slot_length_minutes: int | None) -> int:
    if slot_length_minutes is None:
        return config.DEFAULT_SLOT_MINUTES
    if isinstance(slot_length_minutes, bool) or not isinstance(slot_length_minutes, int) or slot_length_minutes <= 0:
        raise ValidationError('Slot length must be a positive number of minutes.')
    return slot_length_minutes


def generate_slots(
    start_time: str | time,
    end_time: str | time,
    slot_length_minutes: int | None = None,
) -> list[time]:
    """Split the half-open window ``[start_time, end_time)`` into slot start times.

    Every slot fits entirely inside the window; a trailing partial slot is
    dropped. An empty or inverted window yields no slots.
    """
    slot_length_minutes = validate_slot_length(slot_length_minutes)

    window_start = minutes_since_midnight(parse_clock_time(start_time, 'start_time'))
    window_end = minutes_since_midnight(parse_clock_time(end_time, 'end_time'))

    slots: list[time] = []
    current = window_start
    while current + slot_length_minutes <= window_end:
        slots.append(time_from_minutes(current))
        current += slot_length_minutes

    return slots
