import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


def _get_int_list(value: str | None) -> list[int]:
    return [int(item) for item in _get_list(value, [])]

APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hospital.db")
DATA_BACKEND = os.getenv("DATA_BACKEND", "sql").strip().lower()
SUPPORTED_DATA_BACKENDS = {"sql", "memory"}
# Directory ids registered on the in-memory store at startup.
MEMORY_DOCTOR_IDS = _get_int_list(os.getenv("MEMORY_DOCTOR_IDS"))
MEMORY_PATIENT_IDS = _get_int_list(os.getenv("MEMORY_PATIENT_IDS"))

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:5173"])

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = _get_int(os.getenv("JWT_EXPIRES_MINUTES"), 60)

DEFAULT_SLOT_MINUTES = _get_int(os.getenv("DEFAULT_SLOT_MINUTES"), 30)
DEFAULT_APPOINTMENT_DURATION_MINUTES = _get_int(os.getenv("DEFAULT_APPOINTMENT_DURATION_MINUTES"), 30)
MIN_APPOINTMENT_DURATION_MINUTES = _get_int(os.getenv("MIN_APPOINTMENT_DURATION_MINUTES"), 15)
MAX_APPOINTMENT_NOTES_LENGTH = _get_int(os.getenv("MAX_APPOINTMENT_NOTES_LENGTH"), 600)

# Synthesised for days a doctor has never configured.
DEFAULT_WINDOW_START = os.getenv("DEFAULT_WINDOW_START", "09:00")
DEFAULT_WINDOW_END = os.getenv("DEFAULT_WINDOW_END", "17:00")

BOOKING_REQUIRES_LISTED_SLOT = _get_bool(os.getenv("BOOKING_REQUIRES_LISTED_SLOT"), default=False)
ALLOW_PAST_BOOKINGS = _get_bool(os.getenv("ALLOW_PAST_BOOKINGS"), default=False)


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if DATA_BACKEND not in SUPPORTED_DATA_BACKENDS:
        raise RuntimeError(
            f"DATA_BACKEND must be one of {sorted(SUPPORTED_DATA_BACKENDS)}, got {DATA_BACKEND!r}."
        )
    if DEFAULT_SLOT_MINUTES <= 0:
        raise RuntimeError("DEFAULT_SLOT_MINUTES must be a positive number of minutes.")
