"""
Watch history model
One active entry per (user, video); entries older than the window are purged
"""

from sqlalchemy import Column, DateTime, Index, UniqueConstraint, Uuid
from uuid import uuid4

from vtube.db.database import Base
from vtube.utils.date_utils import utcnow


class WatchHistoryEntry(Base):
    """A view of a video by a user"""
    __tablename__ = "watch_history"

    id = Column(Uuid, primary_key=True, default=uuid4)

    user_id = Column(Uuid, nullable=False)

    # Weak references: the entry survives deletion of the video or user
    video_id = Column(Uuid, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'video_id', name='uq_watch_history_user_video'),
        Index('ix_watch_history_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f"<WatchHistoryEntry(user_id={self.user_id}, video_id={self.video_id}, created_at={self.created_at})>"
