from datetime import date, datetime, time

from backend.core.errors import ValidationError

CLOCK_FORMAT = '%H:%M'
DATE_FORMAT = '%Y-%m-%d'


def parse_clock_time(value: str | time, field_name: str = 'time') -> time:
    """Accept ``HH:MM`` (24-hour) or a ``time``; seconds are dropped."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not isinstance(value, str):
        raise ValidationError(f'{field_name} must be a time in HH:MM format.')
    try:
        return datetime.strptime(value.strip(), CLOCK_FORMAT).time()
    except ValueError as exc:
        raise ValidationError(f'{field_name} must be a time in HH:MM format.') from exc


def parse_calendar_date(value: str | date, field_name: str = 'date') -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f'{field_name} must be a date in YYYY-MM-DD format.')
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError as exc:
        raise ValidationError(f'{field_name} must be a date in YYYY-MM-DD format.') from exc


def format_clock_time(value: time) -> str:
    return value.strftime(CLOCK_FORMAT)


def minutes_since_midnight(value: time) -> int:
    return value.hour * 60 + value.minute


def time_from_minutes(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def day_of_week(value: date) -> int:
    # 0=Sunday .. 6=Saturday; date.weekday() starts the week on Monday.
    return (value.weekday() + 1) % 7
