"""
users table: role assignments for identities verified upstream
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, String, Enum, DateTime

from jaybesin.database import Base


class UserRole(str, enum.Enum):
    VIEWER = "viewer"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class User(Base):
    __tablename__ = "users"

    uid = Column(String(128), primary_key=True)  # identity provider uid
    email = Column(String(120), nullable=False, default="")
    role = Column(Enum(UserRole), nullable=False, default=UserRole.VIEWER)
    created_by = Column(String(128), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
