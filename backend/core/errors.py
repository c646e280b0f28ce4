"""Errors raised by the scheduling core.

Every error carries a short message that can be shown to the user as-is.
"""


class SchedulingError(Exception):
    default_message = 'Something went wrong. Please try again.'

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SchedulingError):
    """Malformed input: bad date or time, missing field, illegal transition."""

    default_message = 'The request contains invalid data.'


class NotFoundError(SchedulingError):
    """A referenced doctor, patient or appointment does not exist."""

    default_message = 'The requested record was not found.'


class ConflictError(SchedulingError):
    """The requested time is already taken."""

    default_message = 'This time is already booked.'


class PersistenceError(SchedulingError):
    """The record store rejected the write or could not be reached."""

    default_message = 'Could not save changes. Please try again.'
