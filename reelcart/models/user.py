"""
Reelcart user model

Storefront customers and dashboard admins share one table; the role column
tells them apart at login.
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from enum import Enum
from ..database import Base


class UserRole(str, Enum):
    """User role enumeration"""
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # Basic Info
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone_number = Column(String(30), nullable=True)
    date_born = Column(Date, nullable=True)

    # Authentication
    password = Column(String(500), nullable=False)  # argon2 hash, never the raw value
    role = Column(SQLEnum(UserRole, name="user_role"), default=UserRole.USER, index=True, nullable=False)

    # Activity Tracking
    last_session = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
