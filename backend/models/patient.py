"""Patient model definitions."""

from sqlalchemy import Column, Integer, String

from backend.database import Base


class Patient(Base):
    """Represents a registered patient."""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    patient_code = Column(String, unique=True, index=True)
    first_name = Column(String)
    last_name = Column(String)
    status = Column(String, default="active")  # active/discharged/deceased
