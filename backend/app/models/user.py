"""
User Model
Stores user credentials and profile information.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Index
from app.database import Base


class UserRole(str, enum.Enum):
    """Roles a user record may hold."""
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """
    User model for authentication and administration.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    hashed_password = Column(String(1024), nullable=False)
    role = Column(String(16), default=UserRole.USER.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('ix_users_email', 'email', unique=True),
        Index('ix_users_created_at', 'created_at'),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
