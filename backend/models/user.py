"""User model definitions."""

from sqlalchemy import Boolean, Column, Enum, Integer, String

from backend.auth.roles import Role
from backend.database import Base


class User(Base):
    """Represents a staff member who can sign in."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    full_name = Column(String)
    role = Column(
        Enum(Role, native_enum=False, values_callable=lambda roles: [role.value for role in roles]),
        nullable=False,
    )
    is_active = Column(Boolean, default=True)
