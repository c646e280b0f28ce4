import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.database import Base  # noqa: E402
from backend.models.appointment import Appointment  # noqa: E402
from backend.models.availability import DoctorAvailability  # noqa: E402
from backend.models.patient import Patient  # noqa: E402
from backend.models.user import User  # noqa: E402
from backend.repositories.memory import (  # noqa: E402
    MemoryAppointmentRepository,
    MemoryAvailabilityRepository,
    MemoryDirectoryRepository,
    MemoryStore,
)
from backend.scheduling.availability import AvailabilityService  # noqa: E402
from backend.scheduling.booking import BookingService  # noqa: E402

# Monday 5 January 2026, before opening.
FIXED_NOW = datetime(2026, 1, 5, 8, 0)

DOCTOR_ID = 7
PATIENT_ID = 42

TABLES = [User.__table__, Patient.__table__, DoctorAvailability.__table__, Appointment.__table__]


@pytest.fixture
def memory_store() -> MemoryStore:
    store = MemoryStore()
    store.add_doctor(DOCTOR_ID)
    store.add_patient(PATIENT_ID)
    return store


@pytest.fixture
def availability_service(memory_store: MemoryStore) -> AvailabilityService:
    return AvailabilityService(
        MemoryAvailabilityRepository(memory_store),
        MemoryAppointmentRepository(memory_store),
        slot_length_minutes=30,
    )


@pytest.fixture
def booking_service(memory_store: MemoryStore, availability_service: AvailabilityService) -> BookingService:
    return BookingService(
        MemoryAppointmentRepository(memory_store),
        MemoryDirectoryRepository(memory_store),
        availability_service,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def sql_db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=TABLES)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))
