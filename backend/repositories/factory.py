from sqlalchemy.orm import Session

from backend.core import config
from backend.repositories.memory import (
    MemoryAppointmentRepository,
    MemoryAvailabilityRepository,
    MemoryDirectoryRepository,
    MemoryStore,
)
from backend.repositories.sql import SqlAppointmentRepository, SqlAvailabilityRepository, SqlDirectoryRepository
from backend.scheduling.availability import AvailabilityService
from backend.scheduling.booking import BookingService


def build_memory_store() -> MemoryStore:
    store = MemoryStore()
    store.seed_directory(config.MEMORY_DOCTOR_IDS, config.MEMORY_PATIENT_IDS)
    return store


# Shared by every request when DATA_BACKEND=memory; reset on restart.
memory_store = build_memory_store()


def build_services(db: Session | None, backend: str | None = None) -> tuple[AvailabilityService, BookingService]:
    backend = backend or config.DATA_BACKEND

    if backend == 'memory':
        availability_repository = MemoryAvailabilityRepository(memory_store)
        appointment_repository = MemoryAppointmentRepository(memory_store)
        # Staff and patients still come from the database when a session is available.
        directory_repository = MemoryDirectoryRepository(
            memory_store,
            fallback=SqlDirectoryRepository(db) if db is not None else None,
        )
    else:
        availability_repository = SqlAvailabilityRepository(db)
        appointment_repository = SqlAppointmentRepository(db)
        directory_repository = SqlDirectoryRepository(db)

    availability_service = AvailabilityService(availability_repository, appointment_repository)
    booking_service = BookingService(appointment_repository, directory_repository, availability_service)
    return availability_service, booking_service
