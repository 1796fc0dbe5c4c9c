"""User model."""

from sqlalchemy import Column, String, Boolean, DateTime
from taskboard.db.base import Base


class UserRecord(Base):
    """Registered user row."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    username = Column(String(30), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
