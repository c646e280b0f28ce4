from datetime import date, datetime, time

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_serializer, field_validator
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_db, require_capability
from backend.auth.roles import Capability
from backend.core import config
from backend.core.errors import SchedulingError
from backend.models.user import User
from backend.repositories.factory import build_services
from backend.routes.availability_routes import ensure_database_ready
from backend.routes.errors import to_http_exception
from backend.scheduling.booking import BookingService
from backend.scheduling.schemas import APPOINTMENT_TYPES, AppointmentStatus, BookingRequest
from backend.scheduling.timeutils import format_clock_time

router = APIRouter(tags=['appointments'])


class CreateAppointmentRequest(BaseModel):
    patient_id: int
    doctor_id: int
    date: date
    time: time
    appointment_type: str
    duration_minutes: int = config.DEFAULT_APPOINTMENT_DURATION_MINUTES
    reason: str | None = None
    notes: str | None = None

    @field_validator('appointment_type')
    @classmethod
    def validate_appointment_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in APPOINTMENT_TYPES:
            raise ValueError('Invalid appointment type.')
        return normalized

    @field_validator('reason', 'notes')
    @classmethod
    def validate_free_text(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValueError(f'Must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

        return normalized


class UpdateStatusRequest(BaseModel):
    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    id: int
    human_id: str
    patient_id: int
    doctor_id: int
    date: date
    time: time
    duration_minutes: int
    status: AppointmentStatus
    appointment_type: str
    reason: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('time')
    def serialize_time(self, value: time) -> str:
        return format_clock_time(value)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    if config.DATA_BACKEND == 'sql':
        ensure_database_ready()
    _, booking_service = build_services(db)
    return booking_service


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    doctor_id: int | None = Query(default=None),
    patient_id: int | None = Query(default=None),
    on_date: str | None = Query(default=None, alias='date'),
    appointment_status: str | None = Query(default=None, alias='status'),
    booking: BookingService = Depends(get_booking_service),
    user: User = Depends(require_capability(Capability.VIEW_APPOINTMENTS)),
):
    try:
        appointments = booking.list_appointments(
            doctor_id=doctor_id,
            patient_id=patient_id,
            on_date=on_date,
            status=appointment_status,
        )
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return [AppointmentResponse.model_validate(appointment) for appointment in appointments]


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    booking: BookingService = Depends(get_booking_service),
    user: User = Depends(require_capability(Capability.BOOK_APPOINTMENTS)),
):
    try:
        appointment = booking.create_appointment(BookingRequest(**data.model_dump()))
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return AppointmentResponse.model_validate(appointment)


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    booking: BookingService = Depends(get_booking_service),
    user: User = Depends(require_capability(Capability.VIEW_APPOINTMENTS)),
):
    try:
        appointment = booking.get_appointment(appointment_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return AppointmentResponse.model_validate(appointment)


@router.patch('/{appointment_id}/status', response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    data: UpdateStatusRequest,
    booking: BookingService = Depends(get_booking_service),
    user: User = Depends(require_capability(Capability.UPDATE_APPOINTMENT_STATUS)),
):
    try:
        appointment = booking.update_appointment_status(appointment_id, data.status)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return AppointmentResponse.model_validate(appointment)
