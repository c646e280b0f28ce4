"""Availability model definitions."""

from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, Time

from backend.database import Base


class DoctorAvailability(Base):
    """Represents a doctor's open hours for a weekday or a single date."""
    __tablename__ = "doctor_availability"
    __table_args__ = (
        Index("idx_doctor_availability_doctor_day", "doctor_id", "day_of_week"),
    )

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday .. 6=Saturday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_enabled = Column(Boolean, default=True)
    date_override = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
