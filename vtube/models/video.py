"""
Video model
Owns the external references of its thumbnail and media file
"""

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.sql import func
from uuid import uuid4

from vtube.db.database import Base
from vtube.utils.date_utils import utcnow


class Video(Base):
    """Uploaded video with its media references and view counter"""
    __tablename__ = "videos"

    id = Column(Uuid, primary_key=True, default=uuid4)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)

    # Thumbnail reference in the media store
    thumbnail_url = Column(String(1000), nullable=False)
    thumbnail_kind = Column(String(20), nullable=False, default="image")
    thumbnail_external_id = Column(String(500), nullable=False)

    # Media file reference in the media store
    file_url = Column(String(1000), nullable=False)
    file_kind = Column(String(20), nullable=False, default="video")
    file_external_id = Column(String(500), nullable=False)

    duration = Column(Integer, nullable=False)  # seconds
    views = Column(Integer, nullable=False, default=0)

    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index('ix_videos_owner_created', 'owner_id', 'created_at'),
        Index('ix_videos_created', 'created_at'),
        CheckConstraint('views >= 0', name='views_non_negative'),
        CheckConstraint('duration > 0', name='duration_positive'),
    )

    def __repr__(self):
        return f"<Video(id={self.id}, title={self.title!r}, views={self.views})>"
