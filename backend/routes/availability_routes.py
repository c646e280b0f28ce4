from datetime import date, time

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_serializer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import ensure_can_manage_doctor, get_db, require_capability
from backend.auth.roles import Capability
from backend.core import config
from backend.core.errors import SchedulingError
from backend.database import ensure_appointment_schema, ensure_availability_schema
from backend.models.user import User
from backend.repositories.factory import build_services
from backend.routes.errors import to_http_exception
from backend.scheduling.availability import AvailabilityService
from backend.scheduling.schemas import AvailabilityWindow
from backend.scheduling.timeutils import day_of_week, format_clock_time, parse_calendar_date

router = APIRouter(tags=['availability'])


class SlotResponse(BaseModel):
    time: time

    @field_serializer('time')
    def serialize_time(self, value: time) -> str:
        return format_clock_time(value)


class AvailabilityWindowRequest(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    is_enabled: bool = True
    date_override: date | None = None


class ReplaceWeeklyAvailabilityRequest(BaseModel):
    windows: list[AvailabilityWindowRequest]


class DateOverrideRequest(BaseModel):
    start_time: time
    end_time: time
    is_enabled: bool = True


class AvailabilityWindowResponse(BaseModel):
    doctor_id: int
    day_of_week: int
    start_time: time
    end_time: time
    is_enabled: bool
    date_override: date | None = None

    class Config:
        from_attributes = True

    @field_serializer('start_time', 'end_time')
    def serialize_clock(self, value: time) -> str:
        return format_clock_time(value)


def ensure_database_ready() -> None:
    try:
        ensure_availability_schema()
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    if config.DATA_BACKEND == 'sql':
        ensure_database_ready()
    availability_service, _ = build_services(db)
    return availability_service


@router.get('/doctors/{doctor_id}/slots', response_model=list[SlotResponse])
def get_available_slots(
    doctor_id: int,
    slot_date: str = Query(..., alias='date'),
    availability: AvailabilityService = Depends(get_availability_service),
    user: User = Depends(require_capability(Capability.VIEW_SCHEDULES)),
):
    try:
        slots = availability.get_available_slots(doctor_id, slot_date)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return [SlotResponse(time=slot) for slot in slots]


@router.get('/doctors/{doctor_id}/weekly', response_model=list[AvailabilityWindowResponse])
def get_weekly_availability(
    doctor_id: int,
    availability: AvailabilityService = Depends(get_availability_service),
    user: User = Depends(require_capability(Capability.VIEW_SCHEDULES)),
):
    try:
        windows = availability.get_weekly_availability(doctor_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return [AvailabilityWindowResponse.model_validate(window) for window in windows]


@router.put('/doctors/{doctor_id}/weekly', response_model=list[AvailabilityWindowResponse])
def replace_weekly_availability(
    doctor_id: int,
    data: ReplaceWeeklyAvailabilityRequest,
    availability: AvailabilityService = Depends(get_availability_service),
    user: User = Depends(require_capability(Capability.MANAGE_AVAILABILITY)),
):
    ensure_can_manage_doctor(user, doctor_id)

    windows = [AvailabilityWindow(doctor_id=doctor_id, **window.model_dump()) for window in data.windows]
    try:
        saved = availability.replace_weekly_availability(doctor_id, windows)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return [AvailabilityWindowResponse.model_validate(window) for window in saved]


@router.get('/doctors/{doctor_id}/overrides', response_model=list[AvailabilityWindowResponse])
def list_date_overrides(
    doctor_id: int,
    availability: AvailabilityService = Depends(get_availability_service),
    user: User = Depends(require_capability(Capability.VIEW_SCHEDULES)),
):
    try:
        overrides = availability.list_date_overrides(doctor_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return [AvailabilityWindowResponse.model_validate(window) for window in overrides]


@router.put('/doctors/{doctor_id}/overrides/{override_date}', response_model=AvailabilityWindowResponse)
def set_date_override(
    doctor_id: int,
    override_date: str,
    data: DateOverrideRequest,
    availability: AvailabilityService = Depends(get_availability_service),
    user: User = Depends(require_capability(Capability.MANAGE_AVAILABILITY)),
):
    ensure_can_manage_doctor(user, doctor_id)

    try:
        on_date = parse_calendar_date(override_date)
        window = AvailabilityWindow(
            doctor_id=doctor_id,
            day_of_week=day_of_week(on_date),
            date_override=on_date,
            **data.model_dump(),
        )
        saved = availability.set_date_override(doctor_id, window)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return AvailabilityWindowResponse.model_validate(saved)
