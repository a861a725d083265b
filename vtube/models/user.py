"""
User model: the profile fields engagement projections need
Registration and credentials live in the identity service
"""

from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.sql import func
from uuid import uuid4

from vtube.db.database import Base
from vtube.utils.date_utils import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid4)

    username = Column(String(50), unique=True, nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    full_name = Column(String(100), nullable=True)
    avatar_url = Column(String(500), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"
